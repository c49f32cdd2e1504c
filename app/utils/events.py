from typing import Dict, List, Callable, Any
import asyncio
from concurrent.futures import ThreadPoolExecutor
import logging

logger = logging.getLogger(__name__)

class EventBus:
    """In-process publish/subscribe used for side effects such as email.

    Handler failures are logged and never reach the publisher.
    """

    def __init__(self, max_workers: int = 4):
        self._handlers: Dict[str, List[Callable]] = {}
        self._executor = ThreadPoolExecutor(max_workers=max_workers)

    def subscribe(self, event_type: str, handler: Callable):
        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(self, event_type: str, handler: Callable):
        if handler in self._handlers.get(event_type, []):
            self._handlers[event_type].remove(handler)

    def handlers_for(self, event_type: str) -> List[Callable]:
        return list(self._handlers.get(event_type, []))

    async def publish(self, event_type: str, data: Dict[str, Any]):
        handlers = self.handlers_for(event_type)
        if not handlers:
            logger.debug(f"No handlers registered for event '{event_type}'")
            return

        loop = asyncio.get_running_loop()
        pending = []
        for handler in handlers:
            if asyncio.iscoroutinefunction(handler):
                pending.append(handler(data))
            else:
                pending.append(loop.run_in_executor(self._executor, handler, data))

        results = await asyncio.gather(*pending, return_exceptions=True)
        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                logger.error(f"Error in event handler {handler.__name__} for '{event_type}': {result}")

event_bus = EventBus()
