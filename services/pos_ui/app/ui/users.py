import pandas as pd
import streamlit as st

from api import ApiError

ROLES = ["salesperson", "admin", "manager"]
ROLE_LABELS = {"salesperson": "Salesperson", "admin": "Admin", "manager": "Manager"}


def users_page(store, current_user):
    st.header("👤 Users")

    try:
        users = store.users.fetch()
    except ApiError as e:
        st.error(f"Could not load users: {e}")
        return

    c1, c2, c3 = st.columns(3)
    c1.metric("Users", len(users))
    c2.metric("Salespeople", sum(1 for u in users if u.role == "salesperson"))
    c3.metric("Admins / managers", sum(1 for u in users if u.role != "salesperson"))

    with st.expander("➕ New user"):
        _user_form(store, key="new_user")

    if not users:
        st.info("No users")
        return

    st.dataframe(
        pd.DataFrame(
            [{"name": u.name, "username": u.username, "role": ROLE_LABELS[u.role]} for u in users]
        ),
        use_container_width=True,
        hide_index=True,
    )

    by_id = {u.id: u for u in users}
    user_id = st.selectbox(
        "Edit user", list(by_id), format_func=lambda i: f"{by_id[i].name} ({by_id[i].username})"
    )
    user = by_id[user_id]
    _user_form(store, key=f"edit_user_{user.id}", user=user)

    if user.id == current_user.id:
        st.caption("You cannot delete your own account")
    elif st.button("Delete user"):
        try:
            store.delete_user(user.id)
        except ApiError as e:
            st.error(f"Could not delete user: {e}")
        else:
            st.toast("User deleted")
            st.rerun()


def _user_form(store, key, user=None):
    with st.form(key):
        full_name = st.text_input("Full name", value=user.name if user else "")
        username = st.text_input("Username", value=user.username if user else "")
        password = st.text_input(
            "Password",
            type="password",
            help="Leave empty to keep the current password" if user else None,
        )
        role = st.selectbox(
            "Role",
            ROLES,
            index=ROLES.index(user.role) if user else 0,
            format_func=ROLE_LABELS.get,
        )
        submitted = st.form_submit_button("Save")

    if submitted:
        if not username or (user is None and not password):
            st.error("Username and password are required")
            return
        data = {"username": username, "full_name": full_name, "password": password, "role": role}
        try:
            store.save_user(data, user_id=user.id if user else None)
        except ApiError as e:
            st.error(f"User was not saved: {e}")
        else:
            st.toast("User saved")
            st.rerun()
