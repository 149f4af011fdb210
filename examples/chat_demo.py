"""Minimal terminal console for the chat controller."""

from chat_core.api.service import reset_session, send_message, start_session
from chat_core.domain.exceptions import ValidationError


def _print_last(state: dict, count: int) -> None:
    for msg in state["messages"][-count:]:
        who = "You" if msg["sender"] == "user" else "Bot"
        print(f"{who}: {msg['content']}")


if __name__ == "__main__":
    while True:
        try:
            info = start_session(input("User name/number: "), input("Session id (optional): ") or None)
            break
        except ValidationError as e:
            print(e.message)
    print(f"Session ...{info['short_id']} started. Type /reset to start over, /quit to exit.")

    while True:
        text = input("> ")
        if text == "/quit":
            break
        if text == "/reset":
            reset_session()
            print("Session cleared.")
            break
        result = send_message(text)
        if result["accepted"]:
            _print_last(result, 2)
