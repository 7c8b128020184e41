"""Round-robin mirror rotation."""

from loguru import logger

from sadaksathi.modules.feeds.infrastructure.rotation_store import RotationStateStore


def rotate(
    urls: list[str],
    source_name: str,
    state: dict[str, int],
) -> tuple[list[str], dict[str, int]]:
    """Reorder urls to start after the mirror used last time.

    Lists of zero or one URL come back unchanged with the state untouched.
    Otherwise the next index is (last + 1) mod len(urls), where a source
    never rotated before has last = -1. The returned list holds every
    mirror exactly once.
    """
    if len(urls) <= 1:
        return list(urls), state

    last_index = state.get(source_name, -1)
    next_index = (last_index + 1) % len(urls)
    updated = {**state, source_name: next_index}
    return urls[next_index:] + urls[:next_index], updated


class UrlRotator:
    """Owns the rotation state and persists it after every rotation."""

    def __init__(self, store: RotationStateStore):
        self.store = store
        self._state: dict[str, int] = store.load()

    @property
    def state(self) -> dict[str, int]:
        return dict(self._state)

    def reload(self) -> None:
        self._state = self.store.load()

    def rotate(self, urls: list[str], source_name: str) -> list[str]:
        rotated, updated = rotate(urls, source_name, self._state)
        if updated is self._state:
            return rotated

        self._state = updated
        # Persisted before any mirror is tried.
        try:
            self.store.save(self._state)
        except OSError as e:
            logger.warning(f"Could not persist rotation state: {e}")

        logger.info(
            f"Rotation for {source_name}: starting at mirror "
            f"{updated[source_name] + 1}/{len(urls)}"
        )
        return rotated
