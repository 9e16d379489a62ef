"""KafkaEventPublisher -- 任务变更事件发布

publish_event 只做非阻塞的入队交接：请求路径不等待 Kafka。
单个后台 worker 按 FIFO 顺序把消息交给 aiokafka producer（以 task_id 为 key，
linger_ms 批量发送），因此同一任务的事件保持发布顺序。
producer 由 worker 启动：Broker 不可达时记录警告并丢弃期间的事件，
之后按 reconnect_interval_s 间隔重试连接；单条消息发送失败只记录警告，不重发。
"""

import asyncio

import structlog
from aiokafka import AIOKafkaProducer
from aiokafka.errors import KafkaError

from .models.enums import EventType
from .models.event import TaskEvent
from .models.task import Task

log = structlog.get_logger()

DEFAULT_QUEUE_SIZE = 1000
BATCH_LINGER_MS = 10
RECONNECT_INTERVAL_S = 1.0


class KafkaEventPublisher:
    """EventPublisher 的 Kafka 实现"""

    def __init__(
        self,
        producer: AIOKafkaProducer,
        topic: str,
        queue_maxsize: int = DEFAULT_QUEUE_SIZE,
        reconnect_interval_s: float = RECONNECT_INTERVAL_S,
    ) -> None:
        """
        Args:
            producer: aiokafka producer（由后台 worker 启动）
            topic: 目标 topic
            queue_maxsize: 待发送队列上限，满时丢弃新事件
            reconnect_interval_s: producer 启动失败后两次重试的最小间隔
        """
        self._producer = producer
        self._topic = topic
        self._queue: asyncio.Queue[tuple[bytes, bytes, EventType]] = asyncio.Queue(
            maxsize=queue_maxsize
        )
        self._worker: asyncio.Task | None = None
        self._reconnect_interval_s = reconnect_interval_s
        self._connected = False
        self._next_attempt = 0.0

    @property
    def topic(self) -> str:
        return self._topic

    @property
    def connected(self) -> bool:
        """producer 是否已成功启动"""
        return self._connected

    @property
    def pending(self) -> int:
        """尚未交给 producer 的事件数"""
        return self._queue.qsize()

    async def start(self) -> None:
        """启动后台发送 worker（producer 在 worker 内连接，不阻塞调用方）"""
        self._worker = asyncio.create_task(self._run(), name="kafka-event-publisher")

    def publish_event(
        self,
        event_type: EventType,
        task_id: str,
        data: Task | None = None,
    ) -> None:
        """构造事件并入队，不等待投递结果，不向调用方抛出异常"""
        event = TaskEvent(type=event_type, task_id=task_id, data=data)
        try:
            payload = event.to_message()
        except (TypeError, ValueError) as e:
            log.error("event_serialize_failed", type=event_type, task_id=task_id, error=str(e))
            return
        try:
            self._queue.put_nowait((task_id.encode("utf-8"), payload, event_type))
        except asyncio.QueueFull:
            log.warning("event_dropped_queue_full", type=event_type, task_id=task_id)

    async def flush(self) -> None:
        """等待队列中已有事件全部交给 producer"""
        await self._queue.join()

    async def close(self, timeout_s: float = 5.0) -> None:
        """尽力发送剩余事件后停止 worker 和 producer"""
        if self._worker is not None:
            try:
                await asyncio.wait_for(self._queue.join(), timeout=timeout_s)
            except TimeoutError:
                log.warning("event_flush_timeout", dropped=self._queue.qsize())
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None
        await self._producer.stop()

    async def _connect(self) -> bool:
        """尝试启动 producer；失败后在重试间隔内直接返回 False"""
        if self._connected:
            return True
        loop = asyncio.get_running_loop()
        if loop.time() < self._next_attempt:
            return False
        try:
            await self._producer.start()
        except KafkaError as e:
            self._next_attempt = loop.time() + self._reconnect_interval_s
            log.warning("kafka_unavailable", topic=self._topic, error=str(e))
            return False
        self._connected = True
        log.info("kafka_producer_started", topic=self._topic)
        return True

    async def _run(self) -> None:
        await self._connect()
        while True:
            key, payload, event_type = await self._queue.get()
            try:
                if not await self._connect():
                    log.warning(
                        "event_dropped_producer_down",
                        type=event_type,
                        task_id=key.decode("utf-8"),
                    )
                    continue
                await self._send(key, payload, event_type)
            finally:
                self._queue.task_done()

    async def _send(self, key: bytes, payload: bytes, event_type: EventType) -> None:
        try:
            delivery = await self._producer.send(self._topic, value=payload, key=key)
        except Exception as e:
            log.warning(
                "event_publish_failed",
                type=event_type,
                task_id=key.decode("utf-8"),
                error=str(e),
            )
            return
        delivery.add_done_callback(
            lambda fut: self._on_delivered(fut, key, event_type)
        )

    @staticmethod
    def _on_delivered(fut: asyncio.Future, key: bytes, event_type: EventType) -> None:
        if fut.cancelled():
            return
        if (exc := fut.exception()) is not None:
            log.warning(
                "event_publish_failed",
                type=event_type,
                task_id=key.decode("utf-8"),
                error=str(exc),
            )


async def create_kafka_publisher(
    brokers: str,
    topic: str,
    queue_maxsize: int = DEFAULT_QUEUE_SIZE,
) -> KafkaEventPublisher:
    """创建并启动 Kafka 事件发布器

    启动时 Broker 不可达不影响返回：worker 会持续重试连接，
    连接恢复前的事件记录警告后丢弃。
    """
    producer = AIOKafkaProducer(
        bootstrap_servers=brokers.split(","),
        linger_ms=BATCH_LINGER_MS,
        client_id="taskboard",
    )
    publisher = KafkaEventPublisher(producer, topic, queue_maxsize)
    await publisher.start()
    log.info("kafka_publisher_initialized", brokers=brokers, topic=topic)
    return publisher
