"""Tests for the command line entry point."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from vesting_sync.cli import build_parser, main, serve
from vesting_sync.services.event_sync.supervisor import EXIT_FATAL


class FakeServer:
    """uvicorn.Server stand-in that runs until told to exit."""

    instances: list["FakeServer"] = []

    def __init__(self, config, stop_after=None, signalled=True):
        self.config = config
        self.should_exit = False
        self._stop_after = stop_after
        self._signalled = signalled
        FakeServer.instances.append(self)

    async def serve(self):
        ticks = 0
        while not self.should_exit:
            if self._stop_after is not None and ticks >= self._stop_after:
                self.should_exit = self._signalled
                return
            ticks += 1
            await asyncio.sleep(0)


def _server_factory(**kwargs):
    def factory(config):
        return FakeServer(config, **kwargs)

    return factory


async def _run_forever(*args, **kwargs):
    await asyncio.Event().wait()


class TestServe:
    """Tests for running the sync loop beside the HTTP server."""

    def setup_method(self):
        FakeServer.instances = []

    @pytest.mark.asyncio
    async def test_fatal_sync_stops_server(self, settings):
        """Test a fatal sync error shuts the server down and exits non-zero."""
        supervisor = MagicMock()
        supervisor.run = AsyncMock(return_value=EXIT_FATAL)

        with patch("vesting_sync.cli.SyncSupervisor", return_value=supervisor), patch(
            "vesting_sync.cli.uvicorn.Server", _server_factory()
        ):
            exit_code = await serve(settings)

        assert exit_code == EXIT_FATAL
        assert FakeServer.instances[0].should_exit is True
        supervisor.run.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_signal_stop_exits_zero(self, settings):
        """Test a server stopped by a signal cancels the sync loop and exits 0."""
        supervisor = MagicMock()
        supervisor.run = _run_forever

        with patch("vesting_sync.cli.SyncSupervisor", return_value=supervisor), patch(
            "vesting_sync.cli.uvicorn.Server", _server_factory(stop_after=3)
        ):
            exit_code = await serve(settings)

        assert exit_code == 0

    @pytest.mark.asyncio
    async def test_server_failure_exits_nonzero(self, settings):
        """Test a server that stops on its own is treated as fatal."""
        supervisor = MagicMock()
        supervisor.run = _run_forever

        with patch("vesting_sync.cli.SyncSupervisor", return_value=supervisor), patch(
            "vesting_sync.cli.uvicorn.Server",
            _server_factory(stop_after=3, signalled=False),
        ):
            exit_code = await serve(settings)

        assert exit_code == EXIT_FATAL

    @pytest.mark.asyncio
    async def test_server_uses_configured_address(self, settings):
        """Test uvicorn is configured from settings."""
        supervisor = MagicMock()
        supervisor.run = AsyncMock(return_value=0)

        with patch("vesting_sync.cli.SyncSupervisor", return_value=supervisor), patch(
            "vesting_sync.cli.uvicorn.Server", _server_factory()
        ):
            await serve(settings)

        config = FakeServer.instances[0].config
        assert config.host == settings.http_host
        assert config.port == settings.http_port

    @pytest.mark.asyncio
    async def test_without_http(self, settings):
        """Test --no-http runs only the sync loop."""
        supervisor = MagicMock()
        supervisor.run = AsyncMock(return_value=EXIT_FATAL)

        with patch("vesting_sync.cli.SyncSupervisor", return_value=supervisor), patch(
            "vesting_sync.cli.uvicorn.Server"
        ) as server_cls:
            exit_code = await serve(settings, with_http=False)

        assert exit_code == EXIT_FATAL
        server_cls.assert_not_called()


class TestMain:
    """Tests for argument handling."""

    def test_parser_defaults(self):
        """Test HTTP is enabled unless --no-http is given."""
        args = build_parser().parse_args([])
        assert args.no_http is False
        assert args.host is None
        assert args.port is None

    def test_overrides_applied(self, settings):
        """Test --host and --port override configured values."""
        serve_mock = AsyncMock(return_value=0)

        with patch("vesting_sync.cli.get_settings", return_value=settings), patch(
            "vesting_sync.cli.setup_logging"
        ), patch("vesting_sync.cli.serve", serve_mock):
            exit_code = main(["--host", "127.0.0.1", "--port", "4100", "--no-http"])

        assert exit_code == 0
        effective, = serve_mock.await_args.args
        assert effective.http_host == "127.0.0.1"
        assert effective.http_port == 4100
        assert serve_mock.await_args.kwargs == {"with_http": False}
