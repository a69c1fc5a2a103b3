"""Thread-safe in-memory network between signers and the signing coordinator."""

import threading
import time
from queue import Empty, Queue
from typing import Dict, List

from data_models import SignedMessage

COORDINATOR_ID = 0


class SigningNetwork:
    """签名网络模拟器 / Mailboxes for the coordinator and each registered signer."""

    def __init__(self) -> None:
        self.message_queues: Dict[int, Queue] = {COORDINATOR_ID: Queue()}
        self.lock = threading.Lock()
        self.signing_public_keys: Dict[int, bytes] = {}

    def register_signer(self, signer_id: int, signing_public_key: bytes) -> None:
        if signer_id == COORDINATOR_ID:
            raise ValueError("signer id 0 is reserved for the coordinator")
        with self.lock:
            if signer_id not in self.message_queues:
                self.message_queues[signer_id] = Queue()
            self.signing_public_keys[signer_id] = signing_public_key

    def signer_ids(self) -> List[int]:
        with self.lock:
            return sorted(self.signing_public_keys)

    def get_signing_public_key(self, signer_id: int) -> bytes:
        with self.lock:
            return self.signing_public_keys[signer_id]

    def send_to_coordinator(self, message: SignedMessage) -> None:
        with self.lock:
            self.message_queues[COORDINATOR_ID].put((message.kind, message))

    def broadcast_r_link(self, r_link: int) -> None:
        """广播关联值 / Send the round's linking value to every signer."""
        with self.lock:
            for signer_id, queue in self.message_queues.items():
                if signer_id != COORDINATOR_ID:
                    queue.put(("r_link", r_link))

    def receive_r_link(self, signer_id: int, timeout: float = 5.0) -> int | None:
        try:
            msg_type, data = self.message_queues[signer_id].get(timeout=timeout)
        except Empty:
            return None
        if msg_type != "r_link":
            return None
        return data

    def receive_coordinator_messages(
        self,
        kind: str,
        expected_count: int,
        timeout: float = 5.0,
    ) -> List[SignedMessage]:
        """接收协调者消息 / Collect up to expected_count messages of one kind, requeueing others."""
        messages: List[SignedMessage] = []
        messages_to_requeue = []
        queue = self.message_queues[COORDINATOR_ID]
        end_time = time.time() + timeout

        while len(messages) < expected_count and time.time() < end_time:
            try:
                msg_type, data = queue.get(timeout=0.1)
                if msg_type == kind:
                    messages.append(data)
                else:
                    messages_to_requeue.append((msg_type, data))
            except Empty:
                continue

        for msg in messages_to_requeue:
            queue.put(msg)
        return messages
