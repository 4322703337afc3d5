import streamlit as st

import auth


def login_page(api, kv):
    st.header("🔐 Sign in")

    with st.form("login_form"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in")

    if submitted:
        if not username or not password:
            st.error("Username and password are required")
            return None
        with st.spinner("Signing in..."):
            user = auth.login(api, kv, username, password)
        if user is None:
            st.error("Invalid username or password")
            return None
        st.toast(f"Welcome, {user.name}")
        return user
    return None
