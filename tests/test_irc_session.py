"""Tests for IRCSession (ircbridged/adapters/irc/client.py)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import pytest

from ircbridged.adapters.irc import IRCSession
from ircbridged.events import SessionEstablished, SessionLost
from ircbridged.session.base import SecurityMode, ServerAddress

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_session(
    security: SecurityMode = SecurityMode.NONE,
    host: str = "irc.example.net",
    port: int = 6667,
) -> tuple[IRCSession, MagicMock]:
    bus = MagicMock()
    session = IRCSession(
        bus,
        ServerAddress(host, port),
        "bridgebot",
        "Bridge Bot",
        security=security,
    )
    return session, bus


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    @pytest.mark.asyncio
    async def test_pydle_reconnect_disabled(self):
        session, _ = _make_session()
        assert session.RECONNECT_ON_ERROR is False

    @pytest.mark.asyncio
    async def test_identity(self):
        session, _ = _make_session()
        assert session.username == "bridgebot"
        assert session.realname == "Bridge Bot"

    @pytest.mark.asyncio
    async def test_exposes_address_and_security(self):
        session, _ = _make_session(SecurityMode.TLS, port=6697)
        assert session.address == ServerAddress("irc.example.net", 6697)
        assert session.security is SecurityMode.TLS


# ---------------------------------------------------------------------------
# open
# ---------------------------------------------------------------------------


class TestOpen:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("security", "tls", "tls_verify"),
        [
            (SecurityMode.NONE, False, False),
            (SecurityMode.TLS, True, True),
            (SecurityMode.TLS_INSECURE, True, False),
        ],
    )
    async def test_connects_with_stored_settings(self, security, tls, tls_verify):
        session, _ = _make_session(security, port=6697)
        with patch.object(session, "connect", AsyncMock()) as connect:
            await session.open()
        connect.assert_awaited_once_with(
            hostname="irc.example.net",
            port=6697,
            tls=tls,
            tls_verify=tls_verify,
        )

    @pytest.mark.asyncio
    async def test_reopen_uses_same_settings(self):
        session, _ = _make_session(SecurityMode.TLS)
        with patch.object(session, "connect", AsyncMock()) as connect:
            await session.open()
            await session.open()
        assert connect.await_count == 2
        assert connect.await_args_list[0] == connect.await_args_list[1]

    @pytest.mark.asyncio
    async def test_connect_error_propagates(self):
        session, _ = _make_session()
        with (
            patch.object(session, "connect", AsyncMock(side_effect=ConnectionRefusedError("refused"))),
            pytest.raises(ConnectionRefusedError),
        ):
            await session.open()


# ---------------------------------------------------------------------------
# Connection events
# ---------------------------------------------------------------------------


class TestConnectionEvents:
    @pytest.mark.asyncio
    async def test_on_connect_publishes_session_established(self):
        session, bus = _make_session()
        with patch.object(type(session).__mro__[1], "on_connect", AsyncMock()):
            await session.on_connect()
        bus.publish.assert_called_once()
        source, evt = bus.publish.call_args[0]
        assert source == "irc"
        assert evt == SessionEstablished(server="irc.example.net:6667")

    @pytest.mark.asyncio
    async def test_unexpected_disconnect_publishes_session_lost(self):
        session, bus = _make_session()
        with patch.object(type(session).__mro__[1], "on_disconnect", AsyncMock()):
            await session.on_disconnect(expected=False)
        bus.publish.assert_called_once()
        _, evt = bus.publish.call_args[0]
        assert isinstance(evt, SessionLost)
        assert evt.server == "irc.example.net:6667"

    @pytest.mark.asyncio
    async def test_expected_disconnect_is_silent(self):
        session, bus = _make_session()
        with patch.object(type(session).__mro__[1], "on_disconnect", AsyncMock()):
            await session.on_disconnect(expected=True)
        bus.publish.assert_not_called()


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


class TestOperations:
    @pytest.mark.asyncio
    async def test_send_message(self):
        session, _ = _make_session()
        session.message = AsyncMock()
        await session.send_message("#room", "hi")
        session.message.assert_awaited_once_with("#room", "hi")

    @pytest.mark.asyncio
    async def test_send_notice(self):
        session, _ = _make_session()
        session.notice = AsyncMock()
        await session.send_notice("nick", "psst")
        session.notice.assert_awaited_once_with("nick", "psst")

    @pytest.mark.asyncio
    async def test_join_is_sent_raw_every_time(self):
        session, _ = _make_session()
        session.rawmsg = AsyncMock()
        await session.join_channel("#room")
        await session.join_channel("#room")
        assert session.rawmsg.await_args_list == [(("JOIN", "#room"),), (("JOIN", "#room"),)]

    @pytest.mark.asyncio
    async def test_part_is_sent_raw(self):
        session, _ = _make_session()
        session.rawmsg = AsyncMock()
        await session.part_channel("#room")
        session.rawmsg.assert_awaited_once_with("PART", "#room")

    @pytest.mark.asyncio
    async def test_close_quits_when_connected(self):
        session, _ = _make_session()
        session.quit = AsyncMock()
        with patch.object(type(session), "connected", new_callable=PropertyMock, return_value=True):
            await session.close()
        session.quit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_is_noop_when_disconnected(self):
        session, _ = _make_session()
        session.quit = AsyncMock()
        with patch.object(type(session), "connected", new_callable=PropertyMock, return_value=False):
            await session.close()
        session.quit.assert_not_called()
