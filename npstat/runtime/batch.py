"""
npstat.runtime.batch
====================

Fan-out of several independent requests.

Every message gets its own `Dispatcher`, so no calculator state is shared
between requests. With an executor the requests run concurrently; responses
always come back in message order.

Examples
--------
>>> from concurrent.futures import ThreadPoolExecutor
>>> messages = [
...     {"analysisType": "runs", "variable": {"name": "a"}, "data": [1, 5, 1, 5]},
...     {"analysisType": "runs", "variable": {"name": "b"}, "data": [1, 2, 3, 4]},
... ]
>>> with ThreadPoolExecutor(max_workers=2) as pool:
...     responses = BatchDispatcher(executor=pool).handle_all(messages)
>>> [r["variableName"] for r in responses]
['a', 'b']
"""

from __future__ import annotations
from concurrent.futures import Executor
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from npstat.runtime.dispatcher import Dispatcher


class BatchDispatcher:
    """
    Runner for many requests, one dispatcher per request.

    Useful when the same analysis is run for each of several test variables.
    """

    def __init__(
        self,
        executor: Optional[Executor] = None,
        dispatcher_factory: Callable[[], Dispatcher] = Dispatcher,
    ):
        self.executor = executor
        self.dispatcher_factory = dispatcher_factory

    def handle_one(self, message: Mapping[str, Any]) -> Dict[str, Any]:
        return self.dispatcher_factory().handle(message)

    def handle_all(self, messages: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        """Process every message and return the responses in order."""
        if self.executor is None:
            return [self.handle_one(m) for m in messages]
        return list(self.executor.map(self.handle_one, messages))

    def summary(self, responses: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Count successes and failures across a batch of responses."""
        failed = [r["variableName"] for r in responses if r["status"] != "success"]
        return {
            "total_requests": len(responses),
            "succeeded": len(responses) - len(failed),
            "failed": failed,
        }
