import json
import logging
import math
import threading
import time
import uuid

from collections import OrderedDict, deque
from dataclasses import dataclass, field
from typing import Callable

from django.conf import settings
from django.http import (
    HttpRequest,
    HttpResponse,
    HttpResponseBadRequest,
    HttpResponseNotFound,
    JsonResponse,
    StreamingHttpResponse,
)
from django.views import View

from meme_editor.config import EditorConfig
from meme_editor.editor import MemeEditor
from meme_editor.exporter import NoImageError, export_png

logger = logging.getLogger(__name__)

SESSION_KEY = "meme_editor_id"
EVENT_QUEUE_SIZE = 100
MAX_SESSIONS = 64
SESSION_IDLE_SECONDS = 30 * 60


def sse_message(payload: dict) -> str:
    return f"data: {json.dumps(payload)}\n\n"


@dataclass
class EditorSession:
    editor: MemeEditor
    events: deque = field(default_factory=lambda: deque(maxlen=EVENT_QUEUE_SIZE))
    lock: threading.Lock = field(default_factory=threading.Lock)
    last_seen: float = 0.0


class EditorRegistry:
    """In-memory editors, one per browser session. Nothing outlives the process.

    Sessions idle for longer than ``idle_seconds`` are dropped, and past
    ``max_sessions`` the least recently used one goes first.
    """

    def __init__(
        self,
        max_sessions: int = MAX_SESSIONS,
        idle_seconds: float = SESSION_IDLE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sessions: OrderedDict[str, EditorSession] = OrderedDict()
        self._lock = threading.Lock()
        self._max_sessions = max_sessions
        self._idle_seconds = idle_seconds
        self._clock = clock

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, editor_id: str) -> bool:
        return editor_id in self._sessions

    def get(self, request: HttpRequest) -> EditorSession:
        editor_id = request.session.get(SESSION_KEY)
        now = self._clock()
        with self._lock:
            self._evict_idle(now)
            if editor_id not in self._sessions:
                editor_id = uuid.uuid4().hex
                request.session[SESSION_KEY] = editor_id
                self._sessions[editor_id] = self._create()
                logger.info(f"Created editor {editor_id}")

            session = self._sessions[editor_id]
            session.last_seen = now
            self._sessions.move_to_end(editor_id)
            while len(self._sessions) > self._max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.info(f"Evicted least recently used editor {evicted}")
            return session

    def _evict_idle(self, now: float) -> None:
        for editor_id, session in list(self._sessions.items()):
            if now - session.last_seen <= self._idle_seconds:
                break
            del self._sessions[editor_id]
            logger.info(f"Evicted idle editor {editor_id}")

    @staticmethod
    def _create() -> EditorSession:
        events = deque(maxlen=EVENT_QUEUE_SIZE)
        editor = MemeEditor(
            config=EditorConfig.from_settings(settings),
            on_list_changed=lambda items: events.append(
                sse_message({"event": "list", "items": [i.as_dict() for i in items]})
            ),
            on_mode_changed=lambda mode: events.append(
                sse_message({"event": "mode", "mode": mode.value})
            ),
            on_notice=lambda message: events.append(
                sse_message({"event": "notice", "message": message})
            ),
            on_cursor_changed=lambda cursor: events.append(
                sse_message({"event": "cursor", "cursor": cursor.value})
            ),
        )
        return EditorSession(editor=editor, events=events)


editors = EditorRegistry()


def float_param(request: HttpRequest, name: str) -> float:
    value = float(request.POST[name])
    if not math.isfinite(value):
        raise ValueError(f"{name} must be a finite number")
    return value


class EditorView(View):
    def state_response(self, session: EditorSession) -> JsonResponse:
        return JsonResponse(session.editor.snapshot())


class StreamView(View):
    def get(self, request: HttpRequest) -> StreamingHttpResponse:
        session = editors.get(request)
        return StreamingHttpResponse(
            self.event_stream(session.events),
            content_type="text/event-stream",
        )

    @staticmethod
    def event_stream(events: deque):
        while True:
            yield events.popleft() if events else ""
            time.sleep(1)


class IndexView(EditorView):
    def get(self, request: HttpRequest) -> JsonResponse:
        session = editors.get(request)
        with session.lock:
            ctx = session.editor.snapshot()
            ctx["templates"] = list(session.editor.assets)
        return JsonResponse(ctx)


class TemplateView(EditorView):
    def post(self, request: HttpRequest) -> HttpResponse:
        template_id = request.POST.get("id", "")
        session = editors.get(request)
        with session.lock:
            session.editor.placement.select_template(template_id)
            return self.state_response(session)


class ModeView(EditorView):
    def post(self, request: HttpRequest) -> HttpResponse:
        session = editors.get(request)
        with session.lock:
            try:
                session.editor.placement.set_mode(request.POST.get("mode", ""))
            except ValueError as e:
                return HttpResponseBadRequest(str(e))
            return self.state_response(session)


class ClassicTextView(EditorView):
    def post(self, request: HttpRequest) -> HttpResponse:
        session = editors.get(request)
        with session.lock:
            placement = session.editor.placement
            if "top_text" in request.POST:
                placement.set_top_text(request.POST["top_text"])
            if "bottom_text" in request.POST:
                placement.set_bottom_text(request.POST["bottom_text"])
            return self.state_response(session)


class FontSizeView(EditorView):
    def post(self, request: HttpRequest) -> HttpResponse:
        try:
            size = int(request.POST["size"])
        except (KeyError, ValueError):
            return HttpResponseBadRequest("size must be an integer")

        session = editors.get(request)
        with session.lock:
            session.editor.placement.set_font_size(size)
            return self.state_response(session)


class FreeTextListView(EditorView):
    def post(self, request: HttpRequest) -> HttpResponse:
        session = editors.get(request)
        with session.lock:
            session.editor.placement.add_free_text(request.POST.get("text", ""))
            return self.state_response(session)


class FreeTextRemoveView(EditorView):
    def post(self, request: HttpRequest, text_id: int) -> HttpResponse:
        session = editors.get(request)
        with session.lock:
            session.editor.placement.remove_free_text(text_id)
            return self.state_response(session)


class PointerView(EditorView):
    events = ("down", "move", "up", "leave")

    def post(self, request: HttpRequest, event: str) -> HttpResponse:
        if event not in self.events:
            return HttpResponseNotFound(f"Unknown pointer event: {event}")

        session = editors.get(request)
        with session.lock:
            interaction = session.editor.interaction
            try:
                if "display_width" in request.POST:
                    interaction.set_display_size(
                        float_param(request, "display_width"),
                        float_param(request, "display_height"),
                    )
                if event == "down":
                    interaction.down(float_param(request, "x"), float_param(request, "y"))
                elif event == "move":
                    interaction.move(float_param(request, "x"), float_param(request, "y"))
                elif event == "up":
                    interaction.up()
                else:
                    interaction.leave()
            except (KeyError, ValueError) as e:
                return HttpResponseBadRequest(f"Invalid pointer coordinates: {e}")
            return self.state_response(session)


class CanvasView(EditorView):
    def get(self, request: HttpRequest) -> HttpResponse:
        session = editors.get(request)
        with session.lock:
            data = export_png(session.editor.surface)
        return HttpResponse(data, content_type="image/png")


class MemeView(EditorView):
    def get(self, request: HttpRequest) -> HttpResponse:
        session = editors.get(request)
        with session.lock:
            try:
                file_name, data = session.editor.export()
            except NoImageError as e:
                return JsonResponse({"error": str(e)}, status=409)

        response = HttpResponse(data, content_type="image/png")
        response["Content-Disposition"] = f'attachment; filename="{file_name}"'
        return response
