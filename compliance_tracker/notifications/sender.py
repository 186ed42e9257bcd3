"""Kafka notification sender for expiry alerts."""

import os
import json
import atexit
import logging
import threading
from datetime import datetime, timezone
from typing import Optional

from kafka import KafkaProducer

logger = logging.getLogger(__name__)


class KafkaNotificationSender:
    """
    Hands notification messages to a Kafka topic consumed by the mail relay.
    The producer is created lazily on first send and the sender is failsafe:
    an unavailable broker is logged and the message dropped, never raised to
    the caller.
    """

    def __init__(self, topic: Optional[str] = None, bootstrap_servers: Optional[str] = None):
        self.producer = None
        self._lock = threading.Lock()
        self.topic = topic or os.getenv("KAFKA_NOTIFICATION_TOPIC", "compliance-expiry-notification")
        self.bootstrap_servers = bootstrap_servers or os.getenv("KAFKA_BOOTSTRAP_SERVERS")
        self.server_name = os.getenv("SERVER_NAME", "COMPLIANCE_TRACKER_BACKEND")
        atexit.register(self.close)

    def _initialize_producer(self) -> bool:
        """
        Initializes the KafkaProducer. Called under the lock.
        Returns True on success, False on failure.
        """
        if not self.bootstrap_servers:
            logger.warning("KAFKA_BOOTSTRAP_SERVERS not set. Notification sending disabled.")
            return False

        try:
            logger.info(f"Initializing notification producer for topic '{self.topic}'...")
            producer_config = {
                "bootstrap_servers": self.bootstrap_servers.split(","),
                "value_serializer": lambda v: json.dumps(v, default=str).encode("utf-8"),
                "key_serializer": lambda k: k.encode("utf-8") if k else None,
                "retries": 3,
                "request_timeout_ms": 15000,
                "acks": 1,
                "linger_ms": 10,
            }
            if os.getenv("KAFKA_USE_SSL", "true").lower() == "true":
                producer_config["security_protocol"] = "SSL"

            self.producer = KafkaProducer(**producer_config)
            logger.info(f"Notification producer connected. Topic: '{self.topic}'")
            return True
        except Exception as e:
            logger.error(f"Could not initialize notification producer: {e}", exc_info=True)
            self.producer = None
            return False

    def _on_send_error(self, excp):
        logger.error(f"Error delivering notification to Kafka: {excp}", exc_info=excp)

    def _create_event(self, recipient: str, subject: str, body: str) -> dict:
        return {
            "recipient": recipient,
            "subject": subject,
            "body": body,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "server_name": self.server_name,
            "type": "expiry-notification",
        }

    def send(self, recipient: str, subject: str, body: str) -> bool:
        """
        Queue a notification message. Does not block on delivery.

        Returns:
            True if the message was queued, False if it was dropped
        """
        if not self.producer:
            with self._lock:
                if not self.producer and not self._initialize_producer():
                    logger.warning(f"Notification producer unavailable. Message to {recipient} not sent.")
                    return False

        try:
            future = self.producer.send(
                self.topic,
                key=recipient,
                value=self._create_event(recipient, subject, body)
            )
            future.add_errback(self._on_send_error)
            logger.info(f"Queued expiry notification for {recipient}")
            return True
        except Exception as e:
            logger.error(f"Error while queuing notification for Kafka: {e}", exc_info=True)
            return False

    def close(self):
        """Flushes buffered messages and closes the producer."""
        if self.producer:
            logger.info("Flushing notifications and closing Kafka producer...")
            try:
                self.producer.flush(timeout=10)
            except Exception as e:
                logger.error(f"Error flushing notifications to Kafka: {e}", exc_info=True)
            finally:
                self.producer.close()
                self.producer = None
                logger.info("Notification producer closed.")


def create_notification_sender(topic: Optional[str] = None) -> KafkaNotificationSender:
    """Create a new notification sender instance."""
    return KafkaNotificationSender(topic=topic)
