"""
Reader-writer lock for asyncio.

Many readers may hold the lock together; a writer holds it alone.
Once a writer is waiting, new readers queue behind it so a steady
stream of status queries cannot starve alert updates.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

class ReadWriteLock:
    """asyncio 기반 읽기/쓰기 잠금 (쓰기 우선)"""

    def __init__(self):
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @property
    def readers(self) -> int:
        """현재 읽기 잠금을 보유한 수"""
        return self._readers

    @property
    def writing(self) -> bool:
        """쓰기 잠금 보유 여부"""
        return self._writer

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        """읽기 잠금을 획득합니다."""
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer and self._waiting_writers == 0)
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        """쓰기 잠금을 획득합니다."""
        async with self._cond:
            self._waiting_writers += 1
            try:
                await self._cond.wait_for(lambda: not self._writer and self._readers == 0)
            finally:
                self._waiting_writers -= 1
                # 대기 중 취소된 경우 막혀 있던 읽기 요청을 깨움
                self._cond.notify_all()
            self._writer = True
        try:
            yield
        finally:
            async with self._cond:
                self._writer = False
                self._cond.notify_all()
