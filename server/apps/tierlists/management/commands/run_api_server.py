"""Django management command to serve the tierlist API with cheroot."""

import logging
import os
import shlex
import sys
from typing import Any, Final, final, override

from cheroot.wsgi import Server as WSGIServer
from django.conf import settings
from django.core.management.base import BaseCommand
from django.core.wsgi import get_wsgi_application

logger = logging.getLogger(__name__)

# Set in the child process spawned by the reloader
_RELOAD_ENV_VAR: Final = 'TIERNOW_RELOAD_SUBPROCESS'
_DEFAULT_THREADS: Final = 10


@final
class Command(BaseCommand):
    """Serve the tierlist HTTP API on a cheroot WSGI server."""

    help = 'Serve the tierlist HTTP API (images, tierlists, uploads, moves)'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--host',
            type=str,
            default=None,
            help='Host to bind to (default: TIERNOW_HOST)',
        )
        parser.add_argument(
            '--port',
            type=int,
            default=None,
            help='Port to bind to (default: TIERNOW_PORT)',
        )
        parser.add_argument(
            '--threads',
            type=int,
            default=_DEFAULT_THREADS,
            help='Worker threads handling requests concurrently',
        )
        parser.add_argument(
            '--reload',
            action='store_true',
            default=False,
            help='Restart on Python file changes (development only)',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the command.

        Args:
            args: Positional arguments.
            options: Keyword arguments from command line.
        """
        in_reloader = os.environ.get(_RELOAD_ENV_VAR) == 'true'
        if options['reload'] and not in_reloader:
            self._serve_with_reload(options)
            return
        self._serve(options)

    def _serve(self, options: dict[str, Any]) -> None:
        host = options['host'] or settings.TIERNOW_HOST
        port = options['port'] or settings.TIERNOW_PORT

        server = WSGIServer(
            bind_addr=(host, port),
            wsgi_app=get_wsgi_application(),
            numthreads=options['threads'],
            server_name='Tiernow-API',
        )

        self.stdout.write(
            self.style.SUCCESS(f'Serving tierlist API on {host}:{port}'),
        )
        logger.info(
            'API server listening on %s:%d with %d threads',
            host,
            port,
            options['threads'],
        )
        try:
            server.start()
        except KeyboardInterrupt:
            self.stdout.write(self.style.WARNING('\nShutting down...'))
        finally:
            server.stop()
            logger.info('API server stopped')

    def _serve_with_reload(self, options: dict[str, Any]) -> None:
        """Run the server in a child process restarted on code changes.

        Args:
            options: Command options, forwarded without ``--reload``.
        """
        try:
            import watchfiles  # noqa: PLC0415
        except ImportError:
            self.stderr.write(
                self.style.ERROR(
                    'watchfiles is required for --reload. '
                    'Install with: poetry add -G dev watchfiles',
                ),
            )
            sys.exit(1)

        child = [
            sys.executable, '-m', 'django', 'run_api_server',
            '--threads', str(options['threads']),
        ]
        if options['host']:
            child.extend(['--host', options['host']])
        if options['port']:
            child.extend(['--port', str(options['port'])])

        self.stdout.write(self.style.SUCCESS('Auto-reload enabled'))
        os.environ[_RELOAD_ENV_VAR] = 'true'
        watchfiles.run_process(
            str(settings.BASE_DIR / 'server'),
            target=shlex.join(child),
            target_type='command',
            watch_filter=watchfiles.PythonFilter(),
            callback=self._on_reload,
        )

    def _on_reload(self, changes: set[tuple[Any, str]]) -> None:
        for change_type, path in sorted(changes, key=lambda change: change[1]):
            self.stdout.write(
                self.style.WARNING(f'{change_type.name}: {path}'),
            )
        self.stdout.write(self.style.SUCCESS('Restarting API server...'))
