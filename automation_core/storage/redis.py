"""Redis-backed repository for definitions, scheduled tasks and executions."""

from datetime import datetime
from typing import List, Optional

import redis.asyncio as aioredis
from loguru import logger
from redis.exceptions import WatchError

from ..models.schedule import ScheduledTask
from ..models.workflow import ExecutionContext, WorkflowDefinition


class RedisRepository:
    """Persist automation records in Redis as JSON documents."""

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        key_prefix: str = "automation",
    ) -> None:
        """Initialize repository with Redis connection settings."""
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self._redis: Optional[aioredis.Redis] = None

    async def connect(self) -> None:
        """Establish Redis connection."""
        if not self._redis:
            self._redis = await aioredis.from_url(
                self.redis_url, encoding="utf-8", decode_responses=True
            )
            logger.info("Connected to Redis for automation storage")

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            logger.info("Disconnected from Redis")

    async def _client(self) -> aioredis.Redis:
        if not self._redis:
            await self.connect()
        return self._redis

    def _workflow_key(self, workflow_id: str) -> str:
        return f"{self.key_prefix}:workflow:{workflow_id}"

    def _task_key(self, task_id: str) -> str:
        return f"{self.key_prefix}:scheduled_task:{task_id}"

    def _task_index_key(self) -> str:
        return f"{self.key_prefix}:scheduled_tasks"

    def _execution_key(self, execution_id: str) -> str:
        return f"{self.key_prefix}:execution:{execution_id}"

    def _execution_index_key(self, workflow_id: str) -> str:
        """Sorted set of execution ids scored by start time."""
        return f"{self.key_prefix}:executions:{workflow_id}"

    # -- Workflows ----------------------------------------------------------

    async def get_workflow(self, workflow_id: str) -> Optional[WorkflowDefinition]:
        redis = await self._client()
        data = await redis.get(self._workflow_key(workflow_id))
        if not data:
            return None
        return WorkflowDefinition.model_validate_json(data)

    async def put_workflow(self, workflow: WorkflowDefinition) -> None:
        redis = await self._client()
        await redis.set(self._workflow_key(workflow.id), workflow.model_dump_json())
        logger.debug(f"Saved workflow: {workflow.id}")

    async def delete_workflow(self, workflow_id: str) -> bool:
        redis = await self._client()
        deleted = await redis.delete(self._workflow_key(workflow_id))
        return bool(deleted)

    async def save_execution(self, context: ExecutionContext) -> None:
        redis = await self._client()
        await redis.set(self._execution_key(context.execution_id), context.model_dump_json())
        await redis.zadd(
            self._execution_index_key(context.workflow_id),
            {context.execution_id: context.started_at.timestamp()},
        )
        logger.debug(f"Archived execution {context.execution_id} - {context.status.value}")

    async def list_executions(self, workflow_id: str) -> List[ExecutionContext]:
        redis = await self._client()
        execution_ids = await redis.zrevrange(self._execution_index_key(workflow_id), 0, -1)

        executions = []
        for execution_id in execution_ids:
            data = await redis.get(self._execution_key(execution_id))
            if data:
                executions.append(ExecutionContext.model_validate_json(data))
        return executions

    # -- Scheduled tasks ----------------------------------------------------

    async def get_scheduled_task(self, task_id: str) -> Optional[ScheduledTask]:
        redis = await self._client()
        data = await redis.get(self._task_key(task_id))
        if not data:
            return None
        return ScheduledTask.model_validate_json(data)

    async def put_scheduled_task(self, task: ScheduledTask) -> None:
        redis = await self._client()
        await redis.set(self._task_key(task.id), task.model_dump_json())
        await redis.sadd(self._task_index_key(), task.id)
        logger.debug(f"Saved scheduled task: {task.id}")

    async def delete_scheduled_task(self, task_id: str) -> bool:
        redis = await self._client()
        await redis.srem(self._task_index_key(), task_id)
        deleted = await redis.delete(self._task_key(task_id))
        return bool(deleted)

    async def list_scheduled_tasks(self) -> List[ScheduledTask]:
        redis = await self._client()
        task_ids = await redis.smembers(self._task_index_key())

        tasks = []
        for task_id in sorted(task_ids):
            task = await self.get_scheduled_task(task_id)
            if task:
                tasks.append(task)
        return tasks

    async def claim_scheduled_run(
        self,
        task_id: str,
        expected_next_run: Optional[datetime],
        last_run: datetime,
        next_run: Optional[datetime],
    ) -> bool:
        """Compare-and-swap on ``next_run`` using WATCH/MULTI."""
        redis = await self._client()
        key = self._task_key(task_id)

        async with redis.pipeline(transaction=True) as pipe:
            try:
                await pipe.watch(key)
                data = await pipe.get(key)
                if not data:
                    return False

                task = ScheduledTask.model_validate_json(data)
                if task.next_run != expected_next_run:
                    logger.info(f"Scheduled task {task_id} already claimed by another runner")
                    return False

                task.last_run = last_run
                task.next_run = next_run
                task.updated_at = datetime.utcnow()

                pipe.multi()
                pipe.set(key, task.model_dump_json())
                await pipe.execute()
            except WatchError:
                logger.info(f"Scheduled task {task_id} changed while claiming; skipping")
                return False

        return True
