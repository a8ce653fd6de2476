from django.urls import path

from meme_editor.views import (
    CanvasView,
    ClassicTextView,
    FontSizeView,
    FreeTextListView,
    FreeTextRemoveView,
    IndexView,
    MemeView,
    ModeView,
    PointerView,
    StreamView,
    TemplateView,
)

urlpatterns = [
    path("", IndexView.as_view()),
    path("template", TemplateView.as_view()),
    path("mode", ModeView.as_view()),
    path("classic", ClassicTextView.as_view()),
    path("font-size", FontSizeView.as_view()),
    path("free-texts", FreeTextListView.as_view()),
    path("free-texts/<int:text_id>/remove", FreeTextRemoveView.as_view()),
    path("pointer/<str:event>", PointerView.as_view()),
    path("canvas.png", CanvasView.as_view()),
    path("meme", MemeView.as_view()),
    path("sse", StreamView.as_view()),
]
