"""Ordered request stages run before dispatch.

Each stage is a callable taking no arguments (it reads the Flask request
context) and returning ``Continue()`` or ``Halt(...)``. The first ``Halt``
ends the request: its response is sent as-is, or its error is rendered by
the error funnel. Stages run in registration order on every request.
"""

from dataclasses import dataclass
from typing import Any, Callable, Union

from wanderlust.errors import render_error
from wanderlust.exceptions import AppError


@dataclass(frozen=True)
class Continue:
    pass


@dataclass(frozen=True)
class Halt:
    response: Any = None
    error: AppError | None = None


StageResult = Union[Continue, Halt]
Stage = Callable[[], StageResult]


class RequestPipeline:

    def __init__(self, stages=()):
        self._stages: list[Stage] = list(stages)

    @property
    def stages(self):
        return tuple(self._stages)

    def add(self, stage: Stage) -> Stage:
        self._stages.append(stage)
        return stage

    def run(self):
        for stage in self._stages:
            result = stage()
            if isinstance(result, Halt):
                if result.error is not None:
                    return render_error(result.error)
                return result.response
        return None

    def init_app(self, app):
        app.before_request(self.run)
