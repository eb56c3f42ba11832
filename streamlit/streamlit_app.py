import streamlit as st
import requests
from config import API_BASE_URL, STREAMLIT_CONFIG, EXAMPLE_QUESTIONS, OAUTH_PROVIDERS #type: ignore

from travel_chatbot.client.api import TravelChatClient
from travel_chatbot.client.stream_consumer import ChatStreamConsumer


def init_session_state():
    """Initialize session state variables"""
    if "token" not in st.session_state:
        st.session_state.token = None
    if "conversation_id" not in st.session_state:
        st.session_state.conversation_id = None
    if "transcript" not in st.session_state:
        st.session_state.transcript = None
    if "turn_error" not in st.session_state:
        st.session_state.turn_error = None
    if "refresh_error" not in st.session_state:
        st.session_state.refresh_error = None


def get_client() -> TravelChatClient:
    return TravelChatClient(API_BASE_URL, token=st.session_state.token)


def login_form():
    st.title("🧭 latiNlong")
    st.markdown("Your calm, honest travel buddy. Log in to start planning.")

    login_tab, signup_tab = st.tabs(["Log in", "Sign up"])
    with login_tab:
        with st.form("login"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            if st.form_submit_button("Log in"):
                client = get_client()
                try:
                    client.login(email, password)
                    st.session_state.token = client.token
                    st.rerun()
                except requests.HTTPError:
                    st.error("Invalid credentials")
    with signup_tab:
        with st.form("signup"):
            email = st.text_input("Email")
            password = st.text_input("Password (6+ characters)", type="password")
            first_name = st.text_input("First name")
            if st.form_submit_button("Create account"):
                client = get_client()
                try:
                    client.signup(email, password, first_name=first_name or None)
                    st.session_state.token = client.token
                    st.rerun()
                except requests.HTTPError as e:
                    st.error(f"Signup failed: {e.response.text}")

    if OAUTH_PROVIDERS:
        st.markdown("---")
        for provider, col in zip(OAUTH_PROVIDERS, st.columns(len(OAUTH_PROVIDERS))):
            col.link_button(f"Continue with {provider.title()}", f"{API_BASE_URL}/auth/{provider}", use_container_width=True)


def adopt_oauth_redirect():
    """Pick up the ?token= or ?error= the API appends after an OAuth sign-in"""
    params = st.query_params
    if "token" in params:
        st.session_state.token = params["token"]
        params.clear()
    elif "error" in params:
        st.error(f"Sign-in with {params['error'].title()} failed. Please try again.")
        params.clear()


def open_conversation(conversation_id):
    st.session_state.conversation_id = conversation_id
    st.session_state.transcript = get_client().get_conversation(conversation_id)
    st.session_state.turn_error = None
    st.session_state.refresh_error = None


def start_new_trip():
    """Create a conversation and ask the assistant to open it"""
    conv = get_client().create_conversation("New Trip")
    st.session_state.conversation_id = conv["id"]
    st.session_state.transcript = {**conv, "messages": []}
    st.session_state.pending_turn = ""


def display_message(role, content):
    """Display a message in the chat interface"""
    if role == "system":
        return
    with st.chat_message(role):
        st.markdown(content)


def run_turn(content):
    """Stream one turn into a live bubble, then swap in the saved transcript"""
    if content:
        display_message("user", content)

    with st.chat_message("assistant"):
        placeholder = st.empty()

    def render(consumer: ChatStreamConsumer):
        if consumer.is_streaming:
            placeholder.markdown(consumer.live_text + " ▌" if consumer.live_text else "🤔 Thinking...")
        else:
            placeholder.empty()

    consumer = ChatStreamConsumer(get_client(), st.session_state.conversation_id, on_update=render)
    if consumer.send(content):
        st.session_state.turn_error = None
        if consumer.needs_refresh and not consumer.refresh():
            st.session_state.refresh_error = consumer.error
        else:
            st.session_state.transcript = consumer.transcript
            st.session_state.refresh_error = None
    else:
        st.session_state.turn_error = consumer.error or "The reply failed"
        if content:
            # the user's message was saved even though the reply failed
            open_conversation(st.session_state.conversation_id)
    st.rerun()


def sidebar():
    with st.sidebar:
        st.title("🧭 latiNlong")
        st.markdown("---")

        if st.button("🆕 New Trip", use_container_width=True):
            start_new_trip()
            st.rerun()

        st.markdown("### Your trips")
        for conv in get_client().list_conversations():
            cols = st.columns([4, 1])
            if cols[0].button(conv["title"], key=f"open_{conv['id']}", use_container_width=True):
                open_conversation(conv["id"])
                st.rerun()
            if cols[1].button("🗑️", key=f"delete_{conv['id']}"):
                get_client().delete_conversation(conv["id"])
                if st.session_state.conversation_id == conv["id"]:
                    st.session_state.conversation_id = None
                    st.session_state.transcript = None
                st.rerun()

        st.markdown("---")
        st.markdown("### Try asking")
        for question in EXAMPLE_QUESTIONS:
            if st.button(question, key=f"example_{question}"):
                if not st.session_state.conversation_id:
                    start_new_trip()
                st.session_state.pending_turn = question
                st.rerun()

        st.markdown("---")
        if st.button("Log out"):
            for key in list(st.session_state.keys()):
                del st.session_state[key]
            st.rerun()


def main():
    st.set_page_config(
        page_title=STREAMLIT_CONFIG["page_title"],
        page_icon=STREAMLIT_CONFIG["page_icon"],
        layout="wide",
        initial_sidebar_state="expanded"
    )

    init_session_state()
    adopt_oauth_redirect()

    if not st.session_state.token:
        login_form()
        return

    try:
        sidebar()
    except requests.HTTPError as e:
        if e.response is not None and e.response.status_code == 401:
            st.session_state.token = None
            st.rerun()
        raise

    st.title("💬 Plan your trip")

    if not st.session_state.conversation_id:
        st.info("Start a new trip from the sidebar.")
        return

    for message in st.session_state.transcript.get("messages", []):
        display_message(message["role"], message["content"])

    if st.session_state.turn_error:
        st.error(f"⚠️ The assistant's reply failed: {st.session_state.turn_error}. Send your message again to retry.")

    if st.session_state.refresh_error:
        st.warning(
            f"The reply was saved but the conversation couldn't be refreshed: {st.session_state.refresh_error}. "
            "Reopen the trip from the sidebar to see it."
        )

    if "pending_turn" in st.session_state:
        content = st.session_state.pending_turn
        del st.session_state.pending_turn
        run_turn(content)

    if prompt := st.chat_input("Where do you want to go?"):
        run_turn(prompt)


if __name__ == "__main__":
    main()
