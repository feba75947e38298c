from typing import Annotated

from fastapi import Depends

from textscope.adapters.span_sink.adapter_file import FileSpanSink
from textscope.config.environment_variables import EnvironmentVariables
from textscope.domain.services.span_exporter import FileSpanExporter
from textscope.domain.services.server_tracer import ServerTracer
from textscope.utils.logging import make_logger

logger = make_logger(__name__)


class Singleton(type):
    _instances = {}

    def __call__(cls, *args, **kwargs):
        if cls not in cls._instances:
            cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]


class GlobalDependencies(metaclass=Singleton):
    def __init__(self):
        self.environment_variables: EnvironmentVariables = (
            EnvironmentVariables.refresh()
        )
        self.span_sink: FileSpanSink | None = None
        self.span_exporter: FileSpanExporter | None = None
        self.server_tracer: ServerTracer | None = None
        self._loaded = False

    def load(self):
        if self._loaded:
            return

        self.environment_variables = EnvironmentVariables.refresh()

        # The sink only touches the filesystem on the first exported span
        self.span_sink = FileSpanSink(
            self.environment_variables.OTEL_TRACES_FILE,
            service_name=self.environment_variables.SERVICE_NAME,
        )
        self.span_exporter = FileSpanExporter(self.span_sink)
        self.server_tracer = ServerTracer(self.span_exporter)
        logger.info(
            f"Tracing configured for '{self.environment_variables.SERVICE_NAME}', "
            f"spans go to {self.environment_variables.OTEL_TRACES_FILE}"
        )

        self._loaded = True


def startup_global_dependencies():
    global_dependencies = GlobalDependencies()
    global_dependencies.load()


def shutdown():
    global_dependencies = GlobalDependencies()

    # Closes the trace file exactly once; later exports report FAILURE
    if global_dependencies.span_exporter:
        global_dependencies.span_exporter.shutdown()


def resolve_environment_variable_dependency(environment_variable_key: str):
    return getattr(GlobalDependencies().environment_variables, environment_variable_key)


def environment_variables() -> EnvironmentVariables:
    return GlobalDependencies().environment_variables


def server_tracer() -> ServerTracer:
    global_dependencies = GlobalDependencies()
    global_dependencies.load()
    return global_dependencies.server_tracer


DEnvironmentVariables = Annotated[EnvironmentVariables, Depends(environment_variables)]
DServerTracer = Annotated[ServerTracer, Depends(server_tracer)]
