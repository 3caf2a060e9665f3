"""Notification channel stories: contract checks, routing, defaults and skipping."""

from __future__ import annotations

from typing import Any

import pytest

from mailgun_templates.adapters.memory import EventRecorder, TransportSpy
from mailgun_templates.application.channel import MessageDefaults, TemplatesChannel, prepare_message
from mailgun_templates.application.client import TemplatesClient
from mailgun_templates.domain.errors import AssertionViolation
from mailgun_templates.domain.message import TemplatedMessage


class _Notification:
    """Notification returning whatever its factory builds."""

    def __init__(self, build: Any = None) -> None:
        self._build = build or (lambda notifiable: TemplatedMessage("welcome"))
        self.seen: list[Any] = []

    def to_mailgun(self, notifiable: Any) -> Any:
        self.seen.append(notifiable)
        return self._build(notifiable)


class _User:
    def __init__(self, email: str | None) -> None:
        self.email = email


@pytest.fixture
def channel(transport_spy: TransportSpy, event_recorder: EventRecorder) -> TemplatesChannel:
    client = TemplatesClient(transport_spy, event_recorder, "mg.example.com")
    return TemplatesChannel(
        client,
        MessageDefaults(
            sender="Shop <shop@example.com>",
            reply_to="help@example.com",
            return_path="bounce@example.com",
        ),
    )


# ======================== Contract ========================


@pytest.mark.os_agnostic
def test_notification_without_hook_is_a_violation(channel: TemplatesChannel) -> None:
    """The notification must expose a callable to_mailgun."""
    with pytest.raises(AssertionViolation, match="to_mailgun"):
        channel.send("jane@example.com", object())


@pytest.mark.os_agnostic
def test_non_callable_hook_is_a_violation(channel: TemplatesChannel) -> None:
    """An attribute named to_mailgun that cannot be called is rejected."""

    class _Broken:
        to_mailgun = "welcome"

    with pytest.raises(AssertionViolation):
        channel.send("jane@example.com", _Broken())


@pytest.mark.os_agnostic
def test_hook_returning_wrong_type_is_a_violation(channel: TemplatesChannel, transport_spy: TransportSpy) -> None:
    """The hook must return a TemplatedMessage."""
    notification = _Notification(lambda notifiable: {"template": "welcome"})

    with pytest.raises(AssertionViolation, match="TemplatedMessage"):
        channel.send("jane@example.com", notification)

    assert transport_spy.sent_messages == []


@pytest.mark.os_agnostic
def test_hook_receives_the_notifiable(channel: TemplatesChannel) -> None:
    """to_mailgun is called with the notifiable."""
    user = _User("jane@example.com")
    notification = _Notification()

    channel.send(user, notification)

    assert notification.seen == [user]


# ======================== Routing ========================


@pytest.mark.os_agnostic
def test_channel_routes_when_message_has_no_recipient(channel: TemplatesChannel, transport_spy: TransportSpy) -> None:
    """The recipient comes from the notifiable when the message leaves it unset."""
    channel.send(_User("jane@example.com"), _Notification())

    assert transport_spy.sent_messages[0]["fields"]["to"] == "jane@example.com"


@pytest.mark.os_agnostic
def test_message_recipient_wins_over_routing(channel: TemplatesChannel, transport_spy: TransportSpy) -> None:
    """An explicit recipient on the message is kept."""
    notification = _Notification(lambda notifiable: TemplatedMessage("welcome").to("explicit@example.com"))

    channel.send(_User("jane@example.com"), notification)

    assert transport_spy.sent_messages[0]["fields"]["to"] == "explicit@example.com"


@pytest.mark.os_agnostic
@pytest.mark.parametrize("notifiable", [_User(None), _User(""), "", None])
def test_channel_skips_when_no_recipient_resolves(
    channel: TemplatesChannel,
    transport_spy: TransportSpy,
    event_recorder: EventRecorder,
    notifiable: Any,
) -> None:
    """No recipient means nothing is sent and no event is dispatched."""
    assert channel.send(notifiable, _Notification()) is None

    assert transport_spy.sent_messages == []
    assert event_recorder.events == []


@pytest.mark.os_agnostic
def test_channel_returns_the_transport_response(channel: TemplatesChannel) -> None:
    """A delivered notification yields the provider response."""
    response = channel.send("jane@example.com", _Notification())

    assert response is not None
    assert response.id == "<1@mg.example.com>"


# ======================== Defaults ========================


@pytest.mark.os_agnostic
def test_defaults_fill_unset_fields(channel: TemplatesChannel, transport_spy: TransportSpy) -> None:
    """Configured sender and reply headers are applied to bare messages."""
    channel.send("jane@example.com", _Notification())

    fields = transport_spy.sent_messages[0]["fields"]
    assert fields["from"] == "Shop <shop@example.com>"
    assert fields["h:reply-to"] == ["help@example.com"]
    assert fields["h:return-path"] == ["bounce@example.com"]


@pytest.mark.os_agnostic
def test_defaults_never_override_message_values(channel: TemplatesChannel, transport_spy: TransportSpy) -> None:
    """Values set by the notification are kept."""
    notification = _Notification(
        lambda notifiable: TemplatedMessage("welcome")
        .from_("owner@example.com")
        .reply_to("owner@example.com")
        .return_path("owner-bounce@example.com")
    )

    channel.send("jane@example.com", notification)

    fields = transport_spy.sent_messages[0]["fields"]
    assert fields["from"] == "owner@example.com"
    assert fields["h:reply-to"] == ["owner@example.com"]
    assert fields["h:return-path"] == ["owner-bounce@example.com"]


@pytest.mark.os_agnostic
def test_channel_without_defaults_sends_bare_message(
    transport_spy: TransportSpy,
    event_recorder: EventRecorder,
) -> None:
    """No defaults leaves sender and headers unset."""
    channel = TemplatesChannel(TemplatesClient(transport_spy, event_recorder, "mg.example.com"))

    channel.send("jane@example.com", _Notification())

    assert channel.defaults == MessageDefaults()
    assert transport_spy.sent_messages[0]["fields"] == {"template": "welcome", "to": "jane@example.com"}


# ======================== prepare_message ========================


@pytest.mark.os_agnostic
def test_prepare_message_returns_addressed_message_with_defaults() -> None:
    """prepare_message does everything send does except delivery."""
    message = prepare_message(_User("jane@example.com"), _Notification(), MessageDefaults(sender="shop@example.com"))

    assert message is not None
    assert message.recipient == "jane@example.com"
    assert message.sender == "shop@example.com"


@pytest.mark.os_agnostic
def test_prepare_message_returns_none_without_recipient() -> None:
    """An unroutable notifiable yields None."""
    assert prepare_message(_User(None), _Notification()) is None


@pytest.mark.os_agnostic
def test_prepare_message_checks_the_contract() -> None:
    """Contract violations surface from prepare_message too."""
    with pytest.raises(AssertionViolation):
        prepare_message("jane@example.com", object())


# ======================== Lifecycle ========================


@pytest.mark.os_agnostic
def test_channel_context_closes_transport_when_send_fails(
    transport_spy: TransportSpy,
    event_recorder: EventRecorder,
) -> None:
    """Leaving the with-block closes the transport after an error."""
    transport_spy.raise_exception = RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"), TemplatesChannel(
        TemplatesClient(transport_spy, event_recorder, "mg.example.com")
    ) as channel:
        channel.send("jane@example.com", _Notification())

    assert transport_spy.closed is True
    assert event_recorder.events == []
