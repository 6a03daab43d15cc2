# -*- coding: utf-8 -*-
"""Chat session over the OpenAI API.

A ``ChatSession`` is an owned object with an explicit lifecycle: create it
with a credential, ``start`` it with a system instruction, ``send`` prompts,
and ``close`` it when the feature is left. Several sessions can coexist.
"""
from __future__ import annotations

import base64
import logging
import mimetypes
import os
import typing as t
from pathlib import Path

from openai import OpenAI, OpenAIError

logger = logging.getLogger(__name__)

OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")


class ChatSession:
    """Conversation with one system instruction and its running history.

    :param api_key: Opaque credential; falls back to ``OPENAI_API_KEY``.
    :param model: Chat model name.
    :param client: Pre-built client, mainly for tests.
    :raises RuntimeError: If no credential is available.
    """

    def __init__(
            self,
            api_key: t.Optional[str] = None,
            model: str = OPENAI_MODEL,
            client: t.Optional[OpenAI] = None,
    ) -> None:
        if client is None:
            api_key = api_key or os.getenv("OPENAI_API_KEY")
            if not api_key:
                raise RuntimeError("API key is missing. Set OPENAI_API_KEY or pass api_key.")
            client = OpenAI(api_key=api_key)
        self.client = client
        self.model = model
        self.messages: list[dict[str, t.Any]] = []
        self._closed = False

    @property
    def started(self) -> bool:
        return bool(self.messages)

    def start(self, system_instruction: str) -> None:
        """Starts a fresh conversation, dropping any previous history."""
        self._ensure_open()
        self.messages = [{"role": "system", "content": system_instruction}]

    def send(self, prompt: str, files: t.Sequence[t.Union[str, Path]] = ()) -> str:
        """Sends a user message and returns the assistant's reply.

        :param prompt: Message text; may be blank when files are attached.
        :param files: Paths of images or PDFs sent along with the message.
        :raises ValueError: If a file is not an image or a PDF.
        :raises RuntimeError: If the session was not started or the API call fails.
        """
        self._ensure_open()
        if not self.started:
            raise RuntimeError("Chat session not started. Call start() first.")

        if files:
            content: t.Any = [{"type": "text", "text": prompt}] if prompt else []
            content.extend(file_content_part(path) for path in files)
        else:
            content = prompt
        self.messages.append({"role": "user", "content": content})
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=self.messages,
            )
        except OpenAIError as e:
            # Drop the unanswered prompt so the history stays consistent
            self.messages.pop()
            raise RuntimeError(f"Error contacting the AI service: {e}") from e

        reply = completion.choices[0].message.content or ""
        self.messages.append({"role": "assistant", "content": reply})
        return reply

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.messages = []
        self.client.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Chat session is closed.")

    def __enter__(self) -> ChatSession:
        return self

    def __exit__(self, *exc_info: t.Any) -> None:
        self.close()


def file_content_part(path: t.Union[str, Path]) -> dict[str, t.Any]:
    """Encodes a local image or PDF as an inline chat content part.

    Images become ``image_url`` parts and PDFs become ``file`` parts, both
    carrying the bytes as a base64 data URL.

    :param path: File to attach.
    :return: Content part for a user message.
    :raises ValueError: If the file is neither an image nor a PDF.
    """
    path = Path(path)
    mime_type, _ = mimetypes.guess_type(path.name)
    if mime_type is None or not (mime_type.startswith("image/") or mime_type == "application/pdf"):
        raise ValueError(f"Only images and PDF files can be attached, got {path.name}")
    data_url = f"data:{mime_type};base64,{base64.b64encode(path.read_bytes()).decode('ascii')}"
    if mime_type == "application/pdf":
        return {"type": "file", "file": {"filename": path.name, "file_data": data_url}}
    return {"type": "image_url", "image_url": {"url": data_url}}
