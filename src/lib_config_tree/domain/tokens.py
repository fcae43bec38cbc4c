"""Change-notification tokens.

Purpose
-------
Model "generation N of this data" as a one-shot token. Providers and roots hand
out their current token; when the data is replaced the old token fires once
and a fresh, unfired token takes its place.

Contents
--------
* :class:`ConfigurationReloadToken` – fire-once token with callback
  registration.
* :class:`CallbackRegistration` – handle returned by
  :meth:`ConfigurationReloadToken.register_change_callback`.
* :func:`on_change` / :class:`ChangeTokenRegistration` – keep a consumer
  subscribed across token generations by re-fetching the token after each
  firing.

System Role
-----------
The root subscribes to every provider with :func:`on_change` and republishes a
root-level token, so listeners see provider-level reloads as well as explicit
``reload()`` calls.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from .errors import ConfigurationAggregateError

ChangeCallback = Callable[[Any], None]


class CallbackRegistration:
    """Unregister a change callback when disposed; usable as a context manager."""

    __slots__ = ("_unregister",)

    def __init__(self, unregister: Callable[[], None] | None = None) -> None:
        self._unregister = unregister

    def dispose(self) -> None:
        unregister, self._unregister = self._unregister, None
        if unregister is not None:
            unregister()

    def __enter__(self) -> CallbackRegistration:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()


class ConfigurationReloadToken:
    """One-shot change token fired when the owning data is reloaded.

    Why
    ----
    Consumers need to learn that configuration changed without polling, and
    must never be notified twice for the same generation.

    What
    ----
    Callbacks registered before :meth:`on_reload` are invoked exactly once with
    their ``state`` argument, then the registration list is cleared.
    Registering after the token fired does nothing; callers fetch the current
    token from its owner instead.

    Examples
    --------
    >>> token = ConfigurationReloadToken()
    >>> seen = []
    >>> _ = token.register_change_callback(seen.append, "first")
    >>> token.on_reload()
    >>> token.has_changed, seen
    (True, ['first'])
    >>> token.on_reload()
    >>> seen
    ['first']
    """

    def __init__(self) -> None:
        self._callbacks: dict[object, tuple[ChangeCallback, Any]] = {}
        self._changed = False

    @property
    def has_changed(self) -> bool:
        return self._changed

    @property
    def active_change_callbacks(self) -> bool:
        """Always ``True``: this token invokes callbacks proactively."""

        return True

    def register_change_callback(self, callback: ChangeCallback, state: Any = None) -> CallbackRegistration:
        """Invoke ``callback(state)`` when the token fires; return a handle to unregister."""

        if self._changed:
            return CallbackRegistration()
        handle = object()
        self._callbacks[handle] = (callback, state)
        return CallbackRegistration(lambda: self._callbacks.pop(handle, None))

    def on_reload(self) -> None:
        """Fire the token, invoking every registered callback once.

        Every callback runs even when an earlier one raises; failures are then
        reported together as :class:`ConfigurationAggregateError`.
        """

        if self._changed:
            return
        self._changed = True
        callbacks = list(self._callbacks.values())
        self._callbacks.clear()

        errors: list[BaseException] = []
        for callback, state in callbacks:
            try:
                callback(state)
            except Exception as exc:  # noqa: BLE001 - reported after all callbacks ran
                errors.append(exc)
        if errors:
            raise ConfigurationAggregateError("One or more change callbacks failed.", errors)


class ChangeTokenRegistration:
    """Keep *consumer* subscribed to whatever token *producer* currently returns.

    After every firing the producer is asked for the fresh token before the
    consumer runs, and the registration moves to that token. ``None`` tokens
    (data that never changes) are ignored.
    """

    def __init__(
        self,
        producer: Callable[[], Optional[ConfigurationReloadToken]],
        consumer: Callable[[], None],
    ) -> None:
        self._producer = producer
        self._consumer = consumer
        self._registration: CallbackRegistration | None = None
        self._disposed = False
        self._register(producer())

    def _on_fired(self, _state: Any) -> None:
        token = self._producer()
        try:
            self._consumer()
        finally:
            self._register(token)

    def _register(self, token: Optional[ConfigurationReloadToken]) -> None:
        if token is None or self._disposed:
            return
        registration = token.register_change_callback(self._on_fired)
        if token.has_changed and token.active_change_callbacks:
            registration.dispose()
            return
        self._registration = registration

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        self._disposed = True
        registration, self._registration = self._registration, None
        if registration is not None:
            registration.dispose()

    def __enter__(self) -> ChangeTokenRegistration:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()


def on_change(
    producer: Callable[[], Optional[ConfigurationReloadToken]],
    consumer: Callable[[], None],
) -> ChangeTokenRegistration:
    """Invoke *consumer* on every change signalled by the tokens *producer* returns.

    Examples
    --------
    >>> current = [ConfigurationReloadToken()]
    >>> calls = []
    >>> registration = on_change(lambda: current[0], lambda: calls.append(len(calls)))
    >>> def reload():
    ...     previous, current[0] = current[0], ConfigurationReloadToken()
    ...     previous.on_reload()
    >>> reload(); reload()
    >>> calls
    [0, 1]
    >>> registration.dispose(); reload()
    >>> calls
    [0, 1]
    """

    return ChangeTokenRegistration(producer, consumer)
