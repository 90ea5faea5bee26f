import logging

import redis
from rq import Queue, Worker

from config import settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> None:
    conn = redis.from_url(settings.redis_url)
    queue = Queue(settings.ingest_queue, connection=conn)
    logger.info("Listening for MIDI ingest jobs on queue %r", settings.ingest_queue)
    Worker([queue], connection=conn).work()


if __name__ == "__main__":
    main()
