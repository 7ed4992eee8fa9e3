from dependency_injector import containers, providers

from common.events import EventEmitter
from common.file_watcher.resolver import PatternResolver
from common.file_watcher.session import WatchSession
from common.models import DEFAULT_FILE_TIMEOUT_MS, WatchOptions


class FileGateContainer(containers.DeclarativeContainer):
    config = providers.Configuration(
        default={
            "root": ".",
            "options": {"fileTimeout": DEFAULT_FILE_TIMEOUT_MS},
        }
    )

    sink = providers.Singleton(EventEmitter)

    resolver = providers.Factory(PatternResolver, root=config.root)

    options = providers.Factory(WatchOptions.coerce, config.options)

    session = providers.Factory(
        WatchSession,
        options=options,
        sink=sink,
        resolver=resolver,
    )


container = FileGateContainer()
