"""HTTP preview rendering collaborator backed by an admin-ajax style endpoint."""

import logging
from typing import Optional

import requests

from pyqt_mediawidgets.exceptions import PreviewRenderFailure
from pyqt_mediawidgets.protocols.collaborators import PreviewMarkup
from pyqt_mediawidgets.protocols.form_config import MediaWidgetConfig, get_media_widget_config
from pyqt_mediawidgets.services.shortcode import Shortcode

logger = logging.getLogger(__name__)


class AjaxPreviewClient:
    """
    Posts ``{action, shortcode}`` to the preview endpoint.

    The endpoint answers ``{"success": true, "data": {"head": ..., "body": ...}}``;
    any other answer, HTTP error or transport error raises
    ``PreviewRenderFailure``.
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        session: Optional[requests.Session] = None,
        config: Optional[MediaWidgetConfig] = None,
    ):
        self._config = config or get_media_widget_config()
        self.endpoint = endpoint or self._config.preview_endpoint
        if not self.endpoint:
            raise ValueError("AjaxPreviewClient needs an endpoint (argument or MediaWidgetConfig.preview_endpoint)")
        self._session = session or requests.Session()

    def render(self, shortcode: Shortcode) -> PreviewMarkup:
        data = {"action": self._config.preview_action, "shortcode": shortcode.string()}
        logger.debug(f"POST {self.endpoint} action={data['action']} shortcode={data['shortcode']}")
        try:
            response = self._session.post(
                self.endpoint, data=data, timeout=self._config.preview_request_timeout
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise PreviewRenderFailure(f"Preview request failed: {e}") from e
        except ValueError as e:
            raise PreviewRenderFailure(f"Preview response is not JSON: {e}") from e

        if not isinstance(payload, dict) or not payload.get("success"):
            detail = payload.get("data") if isinstance(payload, dict) else payload
            raise PreviewRenderFailure(f"Preview endpoint rejected {shortcode.tag} shortcode: {detail!r}")

        body = payload.get("data") or {}
        if not isinstance(body, dict):
            raise PreviewRenderFailure(f"Unexpected preview payload: {body!r}")
        return PreviewMarkup(head=body.get("head") or "", body=body.get("body") or "")

    def close(self) -> None:
        self._session.close()
