import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from scm.auth import home_path_for
from scm.routers import api, auth, customer, employee, manager
from scm.security.csrf import csrf_input, csrf_token, install_csrf_cookie_middleware
from scm.security.sessions import install_auth_session_middleware

logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

ROBOTS_HEADER = 'noindex, nofollow, noarchive'

app = FastAPI(title='SCM Portal')

TEMPLATE_DIR = Path(__file__).resolve().parent / 'templates'
app.state.templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
app.state.templates.env.globals['csrf_token'] = csrf_token
app.state.templates.env.globals['csrf_input'] = csrf_input


install_csrf_cookie_middleware(app)
install_auth_session_middleware(app)


# Registered last so it wraps the login redirect as well.
@app.middleware('http')
async def add_security_headers(request: Request, call_next):
    response: Response = await call_next(request)
    response.headers['X-Robots-Tag'] = ROBOTS_HEADER
    response.headers['X-Content-Type-Options'] = 'nosniff'
    return response


app.include_router(auth.router)
app.include_router(customer.router)
app.include_router(employee.router)
app.include_router(manager.router)
app.include_router(api.router)


@app.get('/')
def root(request: Request):
    principal = getattr(request.state, 'principal', None)
    if principal is not None:
        return RedirectResponse(home_path_for(principal.role), status_code=303)
    return request.app.state.templates.TemplateResponse('landing.html', {'request': request})


@app.get('/robots.txt', response_class=PlainTextResponse)
def robots_txt() -> str:
    return 'User-agent: *\nDisallow: /\n'
