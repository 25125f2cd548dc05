"""Tests for the iTerm2 connection and terminal host."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from term_layouts.exceptions import (
    ItermConnectionError,
    ItermNotConnectedError,
    TerminalSpawnError,
)
from term_layouts.iterm import (
    ItermController,
    ItermTerminalHost,
    build_export_line,
    parse_hex_color,
)
from term_layouts.ports import CreateTerminalOptions, TerminalHandle


def make_session(session_id: str, variables: dict | None = None) -> MagicMock:
    session = MagicMock()
    session.session_id = session_id
    session.name = ""
    session.async_set_name = AsyncMock()
    session.async_send_text = AsyncMock()
    session.async_split_pane = AsyncMock()
    session.async_close = AsyncMock()
    variables = variables or {}
    session.async_get_variable = AsyncMock(side_effect=lambda name: variables.get(name))
    return session


def connected_controller(app: MagicMock) -> ItermController:
    controller = ItermController()
    controller.connection = MagicMock()
    controller.app = app
    controller._connected = True
    return controller


def app_with_window(session: MagicMock) -> MagicMock:
    tab = MagicMock()
    tab.current_session = session
    window = MagicMock()
    window.async_create_tab = AsyncMock(return_value=tab)
    app = MagicMock()
    app.current_terminal_window = window
    app.get_session_by_id = MagicMock(return_value=session)
    return app


class TestItermController:
    """Test ItermController connection management."""

    def test_init_not_connected(self):
        controller = ItermController()
        assert controller.connection is None
        assert controller.is_connected is False

    @pytest.mark.asyncio
    async def test_connect_success(self):
        controller = ItermController()
        mock_connection, mock_app = MagicMock(), MagicMock()

        with patch("iterm2.Connection.async_create", new_callable=AsyncMock) as mock_create:
            with patch("iterm2.async_get_app", new_callable=AsyncMock) as mock_get_app:
                mock_create.return_value = mock_connection
                mock_get_app.return_value = mock_app
                assert await controller.connect() is True

        assert controller.connection is mock_connection
        assert controller.require_connection() is mock_app

    @pytest.mark.asyncio
    async def test_connect_refused(self):
        controller = ItermController()
        with patch("iterm2.Connection.async_create", new_callable=AsyncMock) as mock_create:
            mock_create.side_effect = ConnectionRefusedError("refused")
            with pytest.raises(ItermConnectionError) as exc_info:
                await controller.connect()
        assert "Connection refused" in str(exc_info.value)
        assert controller.is_connected is False

    @pytest.mark.asyncio
    async def test_connect_os_error(self):
        controller = ItermController()
        with patch("iterm2.Connection.async_create", new_callable=AsyncMock) as mock_create:
            mock_create.side_effect = OSError("no socket")
            with pytest.raises(ItermConnectionError):
                await controller.connect()

    @pytest.mark.asyncio
    async def test_reconnect(self):
        controller = connected_controller(MagicMock())
        new_app = MagicMock()
        with patch("iterm2.Connection.async_create", new_callable=AsyncMock):
            with patch("iterm2.async_get_app", new_callable=AsyncMock) as mock_get_app:
                mock_get_app.return_value = new_app
                assert await controller.reconnect() is True
        assert controller.require_connection() is new_app

    @pytest.mark.asyncio
    async def test_disconnect(self):
        controller = connected_controller(MagicMock())
        await controller.disconnect()
        assert controller.is_connected is False
        with pytest.raises(ItermNotConnectedError):
            controller.require_connection("list_terminals")


class TestHelpers:
    """Test environment and color helpers."""

    def test_export_line_quotes_values(self):
        assert build_export_line({"A": "1", "MSG": "hello world"}) == "export A=1 MSG='hello world'"

    def test_export_line_empty(self):
        assert build_export_line({}) is None

    def test_export_line_rejects_bad_key(self):
        with pytest.raises(ValueError):
            build_export_line({"BAD-KEY": "x"})

    def test_hex_color(self):
        color = parse_hex_color("#ff8000")
        assert (color.red, color.green, color.blue) == (255, 128, 0)

    def test_hex_color_without_hash(self):
        assert parse_hex_color("00ff00").green == 255

    @pytest.mark.parametrize("value", [None, "", "red", "#fff", "terminal.ansiRed"])
    def test_non_hex_colors_ignored(self, value):
        assert parse_hex_color(value) is None


class TestItermTerminalHost:
    """Test the iTerm2 terminal host."""

    @pytest.mark.asyncio
    async def test_requires_connection(self):
        host = ItermTerminalHost(ItermController())
        with pytest.raises(ItermNotConnectedError):
            await host.create_terminal(CreateTerminalOptions(name="api"))

    @pytest.mark.asyncio
    async def test_create_terminal_in_current_window(self):
        session = make_session("s1")
        app = app_with_window(session)
        host = ItermTerminalHost(connected_controller(app))

        handle = await host.create_terminal(
            CreateTerminalOptions(name="api", working_directory="/srv", environment={"PORT": "80"})
        )

        assert handle == TerminalHandle(id="s1", name="api", working_directory="/srv")
        app.current_terminal_window.async_create_tab.assert_awaited_once()
        session.async_set_name.assert_awaited_once_with("api")
        session.async_send_text.assert_awaited_once_with("export PORT=80\n")

    @pytest.mark.asyncio
    async def test_create_terminal_opens_window(self):
        session = make_session("s1")
        window = MagicMock()
        window.current_tab.current_session = session
        app = MagicMock()
        app.current_terminal_window = None
        host = ItermTerminalHost(connected_controller(app))

        with patch("iterm2.Window.async_create", new_callable=AsyncMock) as mock_create:
            mock_create.return_value = window
            handle = await host.create_terminal(CreateTerminalOptions(name="api"))

        assert handle.id == "s1"
        assert mock_create.await_args.kwargs["profile"] is None

    @pytest.mark.asyncio
    async def test_create_terminal_window_refused(self):
        app = MagicMock()
        app.current_terminal_window = None
        host = ItermTerminalHost(connected_controller(app))
        with patch("iterm2.Window.async_create", new_callable=AsyncMock) as mock_create:
            mock_create.return_value = None
            with pytest.raises(TerminalSpawnError):
                await host.create_terminal(CreateTerminalOptions(name="api"))

    @pytest.mark.asyncio
    async def test_invalid_environment_raises_spawn_error(self):
        app = app_with_window(make_session("s1"))
        host = ItermTerminalHost(connected_controller(app))
        with pytest.raises(TerminalSpawnError) as exc_info:
            await host.create_terminal(CreateTerminalOptions(name="api", environment={"1X": "y"}))
        assert exc_info.value.context["terminal_name"] == "api"

    @pytest.mark.asyncio
    async def test_split_terminal(self):
        parent = make_session("s1")
        child = make_session("s2")
        parent.async_split_pane.return_value = child
        app = app_with_window(parent)
        host = ItermTerminalHost(connected_controller(app))

        handle = await host.split_terminal(
            TerminalHandle(id="s1", name="api"),
            CreateTerminalOptions(name="web", profile="Dark"),
            vertical=False,
        )

        assert handle.id == "s2"
        kwargs = parent.async_split_pane.await_args.kwargs
        assert kwargs["vertical"] is False
        assert kwargs["profile"] == "Dark"
        child.async_set_name.assert_awaited_once_with("web")

    @pytest.mark.asyncio
    async def test_split_without_session_returns_none(self):
        parent = make_session("s1")
        parent.async_split_pane.return_value = None
        host = ItermTerminalHost(connected_controller(app_with_window(parent)))
        handle = await host.split_terminal(TerminalHandle(id="s1", name="api"), CreateTerminalOptions(name="web"))
        assert handle is None

    @pytest.mark.asyncio
    async def test_split_unknown_parent(self):
        app = app_with_window(make_session("s1"))
        app.get_session_by_id.return_value = None
        host = ItermTerminalHost(connected_controller(app))
        with pytest.raises(TerminalSpawnError):
            await host.split_terminal(TerminalHandle(id="gone", name="x"), CreateTerminalOptions(name="web"))

    @pytest.mark.asyncio
    async def test_session_operations(self):
        session = make_session("s1")
        host = ItermTerminalHost(connected_controller(app_with_window(session)))
        handle = TerminalHandle(id="s1", name="zsh")

        await host.rename_terminal(handle, "api")
        await host.send_text(handle, "npm start")
        await host.dispose_terminal(handle)

        assert handle.name == "api"
        session.async_set_name.assert_awaited_once_with("api")
        session.async_send_text.assert_awaited_once_with("npm start\n")
        session.async_close.assert_awaited_once_with(force=True)

    @pytest.mark.asyncio
    async def test_list_terminals(self):
        first = make_session("s1", {"name": "api", "path": "/srv/api"})
        second = make_session("s2", {"name": "web"})
        tab = MagicMock()
        tab.sessions = [first, second]
        window = MagicMock()
        window.tabs = [tab]
        app = MagicMock()
        app.terminal_windows = [window]
        host = ItermTerminalHost(connected_controller(app))

        assert await host.list_terminals() == [
            TerminalHandle(id="s1", name="api", working_directory="/srv/api"),
            TerminalHandle(id="s2", name="web", working_directory=None),
        ]

    @pytest.mark.asyncio
    async def test_list_profiles(self):
        profiles = [MagicMock(), MagicMock(), MagicMock()]
        for profile, name in zip(profiles, ["Light", "Dark", ""]):
            profile.name = name
        host = ItermTerminalHost(connected_controller(MagicMock()))

        with patch("iterm2.PartialProfile.async_query", new_callable=AsyncMock) as mock_query:
            mock_query.return_value = profiles
            assert await host.list_profiles() == ["Dark", "Light"]
