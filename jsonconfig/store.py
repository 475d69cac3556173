"""
Typed JSON config persistence.

``ConfigStore`` binds one file path to one config type. It loads the file
into memory, self-heals to a default value when the file is missing, empty,
corrupt or rejected by the validator, applies validated in-place updates and
writes changes back to disk.

Every guarded operation is written once as a generator of I/O steps (file
checks, reads, decodes, writes). The blocking API runs those steps inline
under the guard; the ``*_async`` API runs each step on a worker thread and
checks for cancellation around it. State changes, validation and listener
calls always happen on the caller's thread or task.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from pathlib import Path
from typing import (
    Any,
    Callable,
    Generator,
    Generic,
    List,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from .cancellation import CancellationToken
from .errors import ErrorKind, InvalidConfigError, OperationCancelled, SerializationError
from .guard import OperationGuard
from .notifier import LoggingNotifier, Notifier
from .result import OperationResult
from .serializer import JsonSerializer, Serializer
from .storage import FileStore, LocalFileStore

logger = logging.getLogger(__name__)

T = TypeVar("T")
S = TypeVar("S")
R = TypeVar("R")

Validator = Callable[[T], bool]
ChangeListener = Callable[[T], None]

# A step is a callable plus its positional arguments; the driver sends back
# the return value or throws the exception it raised.
Step = Tuple[Callable[..., Any], Tuple[Any, ...]]
Steps = Generator[Step, Any, R]


class ConfigStore(Generic[T]):
    """Load, validate, update and persist one typed JSON config file."""

    def __init__(
        self,
        path: Union[Path, str],
        config_type: Type[T],
        *,
        default_factory: Optional[Callable[[], T]] = None,
        validator: Optional[Validator[T]] = None,
        serializer: Optional[Serializer[T]] = None,
        file_store: Optional[FileStore] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self._path = Path(path)
        self._config_type = config_type
        self._default_factory: Callable[[], T] = default_factory or config_type
        self._validator = validator
        self._serializer: Serializer[T] = serializer or JsonSerializer(config_type)
        self._files: FileStore = file_store or LocalFileStore()
        self._notifier: Notifier = notifier or LoggingNotifier()
        self._guard = OperationGuard()
        self._finalizer = weakref.finalize(self, self._guard.close)
        self._listeners: List[ChangeListener[T]] = []
        self._config: Optional[T] = None

    def __enter__(self) -> "ConfigStore[T]":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def path(self) -> Path:
        return self._path

    def close(self) -> None:
        """Release the guard's waiter thread. The store is not reused afterwards.

        Also runs when the store is garbage collected without being closed.
        """
        self._finalizer()

    # ------------------------------------------------------------------
    # Configuration of the store itself
    # ------------------------------------------------------------------

    def set_validator(self, validator: Optional[Validator[T]]) -> None:
        self._validator = validator

    def add_listener(self, listener: ChangeListener[T]) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener[T]) -> bool:
        try:
            self._listeners.remove(listener)
        except ValueError:
            return False
        return True

    # ------------------------------------------------------------------
    # Blocking API
    # ------------------------------------------------------------------

    def load(self, create_if_missing: bool = True) -> OperationResult[T]:
        with self._guard:
            return self._run(self._load_steps(create_if_missing))

    def save(self) -> OperationResult[T]:
        with self._guard:
            return self._run(self._save_steps())

    def update_config(
        self, mutator: Optional[Callable[[T], None]], auto_save: bool = True
    ) -> OperationResult[T]:
        """Mutate the held config in place, validate it and optionally save.

        A value rejected by the validator stays mutated in memory; only the
        save is skipped.
        """
        if mutator is None:
            return OperationResult.failure("Update mutator is None.", ErrorKind.VALIDATION_ERROR)
        with self._guard:
            return self._run(self._update_steps(mutator, auto_save))

    def reset(self, auto_save: bool = True) -> OperationResult[T]:
        with self._guard:
            return self._run(self._create_steps(auto_save))

    def get_section(self, name: str, section_type: Type[S]) -> Optional[S]:
        with self._guard:
            return self._run(self._section_steps(name, section_type))

    def get_config(self) -> Optional[T]:
        with self._guard:
            if self._config is None:
                self._run(self._load_steps(True))
            return self._config

    def set_config(self, config: Optional[T]) -> None:
        if config is None:
            raise InvalidConfigError("Config value must not be None.")
        if not self._is_valid(config):
            raise InvalidConfigError("Config value failed validation.")
        with self._guard:
            self._replace(config)

    def exists(self) -> bool:
        return self._files.exists(self._path)

    def delete(self) -> bool:
        with self._guard:
            try:
                if self._files.exists(self._path):
                    self._files.delete(self._path)
            except OSError as exc:
                self._notifier.error(f"Failed to delete config file {self._path}: {exc}")
                return False
            self._config = None
            logger.debug("Deleted config file %s", self._path)
            return True

    # ------------------------------------------------------------------
    # Async API
    # ------------------------------------------------------------------

    async def load_async(
        self,
        create_if_missing: bool = True,
        cancel_token: Optional[CancellationToken] = None,
    ) -> OperationResult[T]:
        return await self._run_guarded_async(
            self._load_steps(create_if_missing),
            cancel_token,
            lambda: _cancelled("Loading the config file was cancelled."),
        )

    async def save_async(
        self, cancel_token: Optional[CancellationToken] = None
    ) -> OperationResult[T]:
        return await self._run_guarded_async(
            self._save_steps(),
            cancel_token,
            lambda: _cancelled("Saving the config file was cancelled."),
        )

    async def update_config_async(
        self,
        mutator: Optional[Callable[[T], None]],
        auto_save: bool = True,
        cancel_token: Optional[CancellationToken] = None,
    ) -> OperationResult[T]:
        if mutator is None:
            return OperationResult.failure("Update mutator is None.", ErrorKind.VALIDATION_ERROR)
        return await self._run_guarded_async(
            self._update_steps(mutator, auto_save),
            cancel_token,
            lambda: _cancelled("Updating the config was cancelled."),
        )

    async def reset_async(
        self,
        auto_save: bool = True,
        cancel_token: Optional[CancellationToken] = None,
    ) -> OperationResult[T]:
        return await self._run_guarded_async(
            self._create_steps(auto_save),
            cancel_token,
            lambda: _cancelled("Resetting the config was cancelled."),
        )

    async def get_section_async(
        self,
        name: str,
        section_type: Type[S],
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[S]:
        def on_cancel() -> None:
            self._notifier.warn(f"Reading section '{name}' was cancelled.")

        return await self._run_guarded_async(
            self._section_steps(name, section_type), cancel_token, on_cancel
        )

    # ------------------------------------------------------------------
    # Operation steps (guard must be held)
    # ------------------------------------------------------------------

    def _load_steps(self, create_if_missing: bool) -> Steps[OperationResult[T]]:
        kind = ErrorKind.NONE
        message = ""
        try:
            exists = yield self._files.exists, (self._path,)
            if not exists:
                kind = ErrorKind.FILE_NOT_FOUND
                message = f"Config file does not exist, using defaults: {self._path}"
            else:
                text = yield self._files.read_text, (self._path,)
                if not text:
                    kind = ErrorKind.EMPTY_FILE
                    message = f"Config file is empty, using defaults: {self._path}"
                else:
                    config = yield self._serializer.decode, (text,)
                    if not self._is_valid(config):
                        kind = ErrorKind.VALIDATION_ERROR
                        message = "Loaded config failed validation, using defaults."
        except OperationCancelled:
            return _cancelled("Loading the config file was cancelled.")
        except SerializationError as exc:
            kind = ErrorKind.PARSE_ERROR
            message = f"Failed to parse config file {self._path}: {exc}"
        except Exception as exc:  # pylint: disable=broad-except
            kind = ErrorKind.IO_ERROR
            message = f"Failed to load config file {self._path}: {exc}"

        if kind is ErrorKind.NONE:
            self._config = config
            logger.debug("Loaded config from %s", self._path)
            return OperationResult.ok(config)

        logger.debug("Load of %s failed (%s): %s", self._path, kind.name, message)
        if create_if_missing:
            return (yield from self._create_steps(True))
        # Fallback population is not a successful change, so listeners stay quiet.
        self._config = self._default_factory()
        return OperationResult.failure(message, kind)

    def _create_steps(self, auto_save: bool) -> Steps[OperationResult[T]]:
        self._replace(self._default_factory())
        logger.debug("Synthesized default config for %s", self._path)
        if not auto_save:
            return OperationResult.ok(self._config)
        return (yield from self._save_steps())

    def _save_steps(self) -> Steps[OperationResult[T]]:
        config = self._config
        if config is None:
            return OperationResult.failure("No config data to save.", ErrorKind.VALIDATION_ERROR)
        try:
            text = self._serializer.encode(config)
            yield self._files.ensure_parent_dir, (self._path,)
            yield self._files.write_text, (self._path, text)
        except OperationCancelled:
            return _cancelled("Saving the config file was cancelled.")
        except Exception as exc:  # pylint: disable=broad-except
            return OperationResult.failure(
                f"Failed to save config file {self._path}: {exc}", ErrorKind.IO_ERROR
            )
        logger.debug("Saved config to %s", self._path)
        return OperationResult.ok(config)

    def _update_steps(
        self, mutator: Callable[[T], None], auto_save: bool
    ) -> Steps[OperationResult[T]]:
        if self._config is None:
            loaded = yield from self._load_steps(True)
            if not loaded.is_success():
                return loaded

        config = self._config
        mutator(config)
        if not self._is_valid(config):
            return OperationResult.failure(
                "Updated config failed validation.", ErrorKind.VALIDATION_ERROR
            )

        self._notify(config)
        if not auto_save:
            return OperationResult.ok(config)
        return (yield from self._save_steps())

    def _section_steps(self, name: str, section_type: Type[S]) -> Steps[Optional[S]]:
        if self._config is None:
            loaded = yield from self._load_steps(True)
            if loaded.error is ErrorKind.CANCELLED:
                self._notifier.warn(f"Reading section '{name}' was cancelled.")
                return None
            if not loaded.is_success():
                self._notifier.error(f"Failed to load config for section '{name}'.")
                return None

        try:
            tree = self._serializer.to_tree(self._config)
            if name not in tree:
                self._notifier.warn(f"Section '{name}' not found.")
                return None
            return self._serializer.decode_section(tree[name], section_type)
        except Exception as exc:  # pylint: disable=broad-except
            self._notifier.error(
                f"Failed to convert section '{name}' to {_type_name(section_type)}: {exc}"
            )
            return None

    # ------------------------------------------------------------------
    # Drivers
    # ------------------------------------------------------------------

    @staticmethod
    def _run(steps: Steps[R]) -> R:
        try:
            func, args = next(steps)
            while True:
                try:
                    value = func(*args)
                except Exception as exc:  # pylint: disable=broad-except
                    func, args = steps.throw(exc)
                else:
                    func, args = steps.send(value)
        except StopIteration as stop:
            return stop.value

    @staticmethod
    async def _run_async(steps: Steps[R], token: Optional[CancellationToken]) -> R:
        cancelled = False
        try:
            func, args = next(steps)
            while True:
                try:
                    if cancelled or (token is not None and token.cancelled):
                        raise OperationCancelled("Operation was cancelled.")
                    value = await _settle(asyncio.ensure_future(asyncio.to_thread(func, *args)))
                    if token is not None:
                        token.raise_if_cancelled()
                except asyncio.CancelledError:
                    cancelled = True
                    func, args = steps.throw(OperationCancelled("Task was cancelled."))
                except Exception as exc:  # pylint: disable=broad-except
                    if isinstance(exc, OperationCancelled):
                        cancelled = True
                    func, args = steps.throw(exc)
                else:
                    func, args = steps.send(value)
        except StopIteration as stop:
            return stop.value

    async def _run_guarded_async(
        self,
        steps: Steps[R],
        token: Optional[CancellationToken],
        on_cancel: Callable[[], R],
    ) -> R:
        try:
            async with self._guard.acquire_async(token):
                return await self._run_async(steps, token)
        except (OperationCancelled, asyncio.CancelledError):
            steps.close()
            return on_cancel()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _is_valid(self, config: T) -> bool:
        if self._validator is None:
            return True
        try:
            return bool(self._validator(config))
        except Exception as exc:  # pylint: disable=broad-except
            self._notifier.error(f"Config validator raised: {exc}")
            return False

    def _replace(self, config: T) -> None:
        self._config = config
        self._notify(config)

    def _notify(self, config: T) -> None:
        for listener in list(self._listeners):
            try:
                listener(config)
            except Exception as exc:  # pylint: disable=broad-except
                self._notifier.error(f"Config change listener failed: {exc}")


async def _settle(future: "asyncio.Future[Any]") -> Any:
    """Await ``future``; if the awaiting task is cancelled, let it finish first.

    The worker thread cannot be interrupted, so the guard must stay held until
    the step it is running has returned. CancelledError is re-raised once the
    step is done.
    """
    try:
        return await asyncio.shield(future)
    except asyncio.CancelledError:
        while not future.done():
            try:
                await asyncio.wait({future})
            except asyncio.CancelledError:
                continue
        if not future.cancelled():
            future.exception()
        raise


def _cancelled(message: str) -> OperationResult[Any]:
    return OperationResult.failure(message, ErrorKind.CANCELLED)


def _type_name(section_type: Any) -> str:
    return getattr(section_type, "__name__", repr(section_type))
