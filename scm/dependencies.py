from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates


def get_templates(request: Request) -> Jinja2Templates:
    return request.app.state.templates


def get_client_ip(request: Request) -> str | None:
    forwarded_for = request.headers.get('x-forwarded-for')
    if forwarded_for:
        return forwarded_for.split(',')[0].strip()
    if request.client:
        return request.client.host
    return None


def flash_message(request: Request) -> dict:
    """Banner text carried across a post/redirect/get round trip."""
    message = request.query_params.get('message', '').strip()
    error = request.query_params.get('error', '').strip()
    return {'message': message or None, 'error': error or None}


def redirect_with_flash(path: str, *, message: str | None = None, error: str | None = None) -> RedirectResponse:
    params = {key: value for key, value in (('message', message), ('error', error)) if value}
    return RedirectResponse(f'{path}?{urlencode(params)}' if params else path, status_code=303)
