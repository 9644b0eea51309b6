"""Service layer — command handlers returning :class:`ServiceResult`.

Each service takes the :class:`~taskboard.infrastructure.workspace.Workspace`
and an optional cancellation event. Typed domain failures are converted to
``ServiceResult(ok=False)`` here; store failures propagate unchanged.
"""
