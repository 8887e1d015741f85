import io

from visa_core.api.console import ConsoleView
from visa_core.domain.session import Message, RequestStatus


def test_console_view_prints_new_assistant_messages_once():
    out = io.StringIO()
    view = ConsoleView(out)
    user = Message.create("user", "France visa?")
    reply = Message.create("assistant", "You need a passport.")

    view.render([user], RequestStatus.SUBMITTED, {})
    view.render([user, reply], RequestStatus.IDLE, {reply.id: 1500.0})
    view.render([user, reply], RequestStatus.IDLE, {reply.id: 1500.0})

    text = out.getvalue()
    assert "... thinking" in text
    assert text.count("Assistant: You need a passport.  (1.5s)") == 1
    assert "France visa?" not in text


def test_console_view_reports_errors():
    out = io.StringIO()
    ConsoleView(out).render([Message.create("user", "Schengen visa?")], RequestStatus.ERROR, {})
    assert "[error]" in out.getvalue()
