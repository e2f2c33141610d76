"""Per-operation progress payloads for remote git operations."""

from collections.abc import Callable, Sequence
from typing import Literal

from pydantic import BaseModel, ConfigDict

from deskgit.progress.models import GitOutput, GitProgress

OperationKind = Literal["clone", "fetch", "pull", "push", "checkout"]

DEFAULT_CONTEXT_PREFIXES: tuple[str, ...] = ("remote: Counting objects",)


class OperationProgress(BaseModel):
    """What a progress bar shows for one running operation."""

    model_config = ConfigDict(frozen=True)

    kind: OperationKind
    title: str
    value: float
    description: str | None = None
    remote: str | None = None


OperationCallback = Callable[[OperationProgress], None]


class RemoteOperationProgress:
    """Adapts parser events into :class:`OperationProgress` updates.

    Besides progress from both ends of the connection, stderr of a remote
    operation carries ref update summaries. Context lines are dropped unless
    they start with one of the allowed prefixes.
    """

    def __init__(
        self,
        kind: OperationKind,
        title: str,
        callback: OperationCallback,
        *,
        remote: str | None = None,
        context_prefixes: Sequence[str] = DEFAULT_CONTEXT_PREFIXES,
    ) -> None:
        self.kind = kind
        self.title = title
        self.remote = remote
        self._callback = callback
        self._context_prefixes = tuple(context_prefixes)

    def start(self) -> None:
        self._callback(
            OperationProgress(kind=self.kind, title=self.title, value=0, remote=self.remote)
        )

    def __call__(self, event: GitProgress | GitOutput) -> None:
        if isinstance(event, GitOutput):
            if not event.text.startswith(self._context_prefixes):
                return
            description = event.text
        else:
            description = event.details.text

        self._callback(
            OperationProgress(
                kind=self.kind,
                title=self.title,
                value=event.percent,
                description=description,
                remote=self.remote,
            )
        )


def remote_operation_progress(
    kind: OperationKind,
    title: str,
    callback: OperationCallback,
    *,
    remote: str | None = None,
    context_prefixes: Sequence[str] = DEFAULT_CONTEXT_PREFIXES,
) -> RemoteOperationProgress:
    return RemoteOperationProgress(
        kind, title, callback, remote=remote, context_prefixes=context_prefixes
    )
