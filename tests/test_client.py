"""Send client stories: domain selection, events and error propagation."""

from __future__ import annotations

import httpx
import pytest

from mailgun_templates.adapters.memory import QUEUED_MESSAGE, EventRecorder, TransportSpy
from mailgun_templates.application.client import TemplatesClient
from mailgun_templates.domain.errors import SerializationError
from mailgun_templates.domain.events import MessageSent
from mailgun_templates.domain.message import TemplatedMessage


@pytest.fixture
def client(transport_spy: TransportSpy, event_recorder: EventRecorder) -> TemplatesClient:
    return TemplatesClient(transport_spy, event_recorder, "mg.example.com")


@pytest.mark.os_agnostic
def test_client_exposes_its_default_domain(client: TemplatesClient) -> None:
    """The configured domain is readable."""
    assert client.domain == "mg.example.com"


@pytest.mark.os_agnostic
def test_client_sends_through_default_domain(client: TemplatesClient, transport_spy: TransportSpy) -> None:
    """Messages without their own domain use the client's."""
    client.send(TemplatedMessage("welcome").to("jane@example.com"))

    assert transport_spy.sent_messages[0]["domain"] == "mg.example.com"


@pytest.mark.os_agnostic
def test_message_domain_overrides_client_domain(client: TemplatesClient, transport_spy: TransportSpy) -> None:
    """A per-message domain selects a different endpoint."""
    client.send(TemplatedMessage("welcome").to("jane@example.com").via("mg.other.com"))

    assert transport_spy.sent_messages[0]["domain"] == "mg.other.com"


@pytest.mark.os_agnostic
def test_client_hands_the_wire_format_to_the_transport(client: TemplatesClient, transport_spy: TransportSpy) -> None:
    """The transport receives exactly the encoded fields."""
    message = TemplatedMessage("welcome").to("jane@example.com").param("name", "Jo")

    client.send(message)

    assert transport_spy.sent_messages[0]["fields"] == message.to_wire_format()


@pytest.mark.os_agnostic
def test_client_returns_transport_response(client: TemplatesClient) -> None:
    """The caller gets the provider's message id."""
    response = client.send(TemplatedMessage("welcome").to("jane@example.com"))

    assert response.id == "<1@mg.example.com>"
    assert response.message == QUEUED_MESSAGE


@pytest.mark.os_agnostic
def test_client_dispatches_message_sent_after_success(client: TemplatesClient, event_recorder: EventRecorder) -> None:
    """One MessageSent event per accepted message."""
    response = client.send(TemplatedMessage("welcome").to("jane@example.com"))

    assert event_recorder.events == [MessageSent(message_id=response.id, message=response.message)]


@pytest.mark.os_agnostic
def test_transport_errors_propagate_without_event(
    client: TemplatesClient, transport_spy: TransportSpy, event_recorder: EventRecorder
) -> None:
    """A failed send raises the transport's error and announces nothing."""
    transport_spy.raise_exception = httpx.ConnectError("connection refused")

    with pytest.raises(httpx.ConnectError):
        client.send(TemplatedMessage("welcome").to("jane@example.com"))

    assert event_recorder.events == []


@pytest.mark.os_agnostic
def test_unencodable_params_fail_before_transport(
    client: TemplatesClient, transport_spy: TransportSpy, event_recorder: EventRecorder
) -> None:
    """Encoding errors surface before anything is sent."""
    with pytest.raises(SerializationError):
        client.send(TemplatedMessage("welcome").to("jane@example.com").param("bad", object()))

    assert transport_spy.sent_messages == []
    assert event_recorder.events == []


@pytest.mark.os_agnostic
def test_client_does_not_modify_the_message(client: TemplatesClient) -> None:
    """Sending leaves the message exactly as built."""
    message = TemplatedMessage("welcome").to("jane@example.com").option("tracking", False)
    before = (message.to_wire_format(), message.options, message.headers, message.domain)

    client.send(message)

    assert (message.to_wire_format(), message.options, message.headers, message.domain) == before
