"""Mock todo application for offline runs of the suite.

This mock server implements the parts of the todo application the suite
touches:
- GET /                 single-page UI (login form, then the todo card)
- POST /api/login       authenticate, returns the id token the UI stores
- GET/POST /api/todos   list / create todos for the logged-in user
- GET /backend/todos    backend listing filtered by ?userId=
- GET /backend/openapi.json

Creation beyond MAX_TODOS is rejected, which is the capacity limit the
frontend scenario probes. State is in memory and shared by all clients.
"""
from __future__ import annotations

import json
import logging
import secrets
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from flask import Flask, Response, jsonify, request
from werkzeug.serving import make_server

logger = logging.getLogger(__name__)

# Default test credentials
MOCK_USER = "alice"
MOCK_EMAIL = "alice@example.test"
MOCK_PASSWORD = "pw1"

MAX_TODOS = 30
LOGIN_PATH = "/api/login"
BACKEND_PREFIX = "/backend"

# Mock data storage
TOKENS: Dict[str, str] = {}  # id token -> username
TODOS: Dict[str, List[Dict[str, str]]] = {}  # username -> todos
USERS: Dict[str, str] = {MOCK_USER: MOCK_PASSWORD}

OPENAPI_DOCUMENT: Dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Mock todo backend", "version": "1.0.0"},
    "paths": {
        "/todos": {
            "get": {
                "summary": "List the todos of a user",
                "parameters": [
                    {"name": "userId", "in": "query", "required": True, "schema": {"type": "string"}},
                ],
                "responses": {"200": {"description": "Todos of the user"}},
            }
        },
        "/todos/count": {
            "get": {
                "summary": "Count the todos of a user",
                "parameters": [
                    {"name": "owner", "in": "query", "required": True, "schema": {"type": "string"}},
                ],
                "responses": {"200": {"description": "Number of todos"}},
            }
        },
    },
}

INDEX_HTML = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Todos</title>
</head>
<body>
<main id="app"></main>
<script>
const app = document.getElementById('app');
const TOKEN_PREFIX = 'CognitoIdentityServiceProvider.mock.';

function renderLogin() {
  app.innerHTML = `
    <form id="login-form">
      <label for="username">Username</label>
      <input id="username" name="username" autocomplete="username">
      <label for="password">Password</label>
      <input id="password" name="password" type="password" autocomplete="current-password">
      <button type="submit">Sign in</button>
    </form>
    <p id="login-error" role="alert"></p>`;
  document.getElementById('login-form').addEventListener('submit', async (event) => {
    event.preventDefault();
    const username = document.getElementById('username').value;
    const password = document.getElementById('password').value;
    const resp = await fetch('/api/login', {
      method: 'POST',
      headers: {'Content-Type': 'application/json'},
      body: JSON.stringify({username, password}),
    });
    if (!resp.ok) {
      document.getElementById('login-error').textContent = 'Invalid credentials';
      return;
    }
    const data = await resp.json();
    localStorage.setItem(TOKEN_PREFIX + data.username + '.idToken', data.idToken);
    await renderHome(data.idToken);
  });
}

function renderTodos(todos) {
  const list = document.getElementById('todo-list');
  list.replaceChildren(...todos.map((todo) => {
    const item = document.createElement('li');
    item.className = 'todo';
    const title = document.createElement('strong');
    title.textContent = todo.title;
    const details = document.createElement('div');
    details.className = 'todo-details';
    details.textContent = todo.details;
    item.append(title, details);
    return item;
  }));
}

async function renderHome(token) {
  app.innerHTML = `
    <section class="card" hidden>
      <h1>My todos</h1>
      <form id="todo-form">
        <label for="title">Title</label>
        <input id="title" name="title">
        <label for="details">Details</label>
        <textarea id="details" name="details"></textarea>
        <button type="submit">Add todo</button>
      </form>
      <p id="todo-error" role="alert"></p>
      <ul id="todo-list"></ul>
    </section>`;
  const headers = {'Authorization': 'Bearer ' + token};
  const resp = await fetch('/api/todos', {headers});
  renderTodos(await resp.json());
  document.querySelector('.card').hidden = false;

  document.getElementById('todo-form').addEventListener('submit', async (event) => {
    event.preventDefault();
    const titleInput = document.getElementById('title');
    const detailsInput = document.getElementById('details');
    const body = JSON.stringify({title: titleInput.value, details: detailsInput.value});
    titleInput.value = '';
    detailsInput.value = '';
    const created = await fetch('/api/todos', {
      method: 'POST',
      headers: {...headers, 'Content-Type': 'application/json'},
      body,
    });
    const data = await created.json();
    if (!created.ok) {
      document.getElementById('todo-error').textContent = data.message;
      return;
    }
    renderTodos(data.todos);
  });
}

renderLogin();
</script>
</body>
</html>
"""


def reset_mock_state() -> None:
    TOKENS.clear()
    TODOS.clear()


def seed_todos(username: str, count: int) -> None:
    """Pre-fill ``count`` todos for ``username`` (capped at MAX_TODOS)."""
    todos = TODOS.setdefault(username, [])
    for i in range(min(count, MAX_TODOS - len(todos))):
        todos.append({"title": f"Seed_{i}", "details": f"Seeded todo {i}"})


def issue_token(username: str) -> str:
    token = secrets.token_urlsafe(32)
    TOKENS[token] = username
    return token


def create_mock_app() -> Flask:
    """Create and configure the mock todo Flask app."""
    app = Flask(__name__)
    app.config['TESTING'] = True

    def _authenticated_user() -> Optional[str]:
        header = request.headers.get('Authorization', '')
        scheme, _, token = header.partition(' ')
        if scheme != 'Bearer' or not token:
            return None
        return TOKENS.get(token)

    def _unauthorized() -> Tuple[Response, int]:
        return jsonify({"message": "Invalid or missing bearer token"}), 401

    @app.route('/')
    def index():
        return Response(INDEX_HTML, mimetype='text/html')

    @app.route(LOGIN_PATH, methods=['POST'])
    def login():
        data = request.get_json(silent=True) or {}
        username = data.get('username', '')
        if not username or USERS.get(username) != data.get('password'):
            return jsonify({"message": "Invalid credentials"}), 401
        return jsonify({"username": username, "idToken": issue_token(username)}), 200

    @app.route('/api/todos', methods=['GET'])
    def list_todos():
        username = _authenticated_user()
        if username is None:
            return _unauthorized()
        return jsonify(TODOS.get(username, []))

    @app.route('/api/todos', methods=['POST'])
    def create_todo():
        username = _authenticated_user()
        if username is None:
            return _unauthorized()

        data = request.get_json(silent=True) or {}
        title = (data.get('title') or '').strip()
        details = (data.get('details') or '').strip()
        if not title or not details:
            return jsonify({"message": "Title and details are required"}), 400

        todos = TODOS.setdefault(username, [])
        if len(todos) >= MAX_TODOS:
            return jsonify({"message": f"Maximum number of todos ({MAX_TODOS}) reached"}), 422

        todos.append({"title": title, "details": details})
        return jsonify({"todos": todos}), 201

    @app.route(f'{BACKEND_PREFIX}/todos', methods=['GET'])
    def backend_todos():
        if _authenticated_user() is None:
            return _unauthorized()
        user_id = request.args.get('userId')
        if not user_id:
            return jsonify({"message": "userId query parameter is required"}), 400
        return jsonify(TODOS.get(user_id, []))

    @app.route(f'{BACKEND_PREFIX}/todos/count', methods=['GET'])
    def backend_todo_count():
        if _authenticated_user() is None:
            return _unauthorized()
        owner = request.args.get('owner', '')
        return jsonify({"owner": owner, "count": len(TODOS.get(owner, []))})

    @app.route(f'{BACKEND_PREFIX}/openapi.json', methods=['GET'])
    def openapi():
        return jsonify(OPENAPI_DOCUMENT)

    return app


class MockTodoServer:
    """Threaded werkzeug server for the mock app, bound to a free port by default."""

    def __init__(self, host: str = '127.0.0.1', port: int = 0):
        self.host = host
        self.app = create_mock_app()
        self.server = make_server(host, port, self.app, threaded=True)
        self.port = self.server.server_port
        self.thread: Optional[threading.Thread] = None

    def start(self) -> "MockTodoServer":
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.thread.start()
        logger.info("Mock todo app listening on %s", self.url)
        return self

    def stop(self) -> None:
        self.server.shutdown()
        if self.thread:
            self.thread.join(timeout=5)
        self.server.server_close()

    def __enter__(self) -> "MockTodoServer":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def backend_url(self) -> str:
        return f"{self.url}{BACKEND_PREFIX}"


def mock_settings(server: MockTodoServer, token: str = "") -> Dict[str, str]:
    return {
        "baseUrl": f"{server.url}/",
        "loginUrl": LOGIN_PATH,
        "user": MOCK_USER,
        "email": MOCK_EMAIL,
        "password": MOCK_PASSWORD,
        "token": token,
        "backendUrl": server.backend_url,
    }


def write_mock_target(directory: Path, server: MockTodoServer, token: str = "") -> Tuple[Path, Path]:
    """Write settings.json and openapi.txt for ``server`` into ``directory``."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    settings_path = directory / "settings.json"
    settings_path.write_text(json.dumps(mock_settings(server, token), indent=2), encoding="utf-8")

    openapi_path = directory / "openapi.txt"
    openapi_path.write_text(json.dumps(OPENAPI_DOCUMENT, indent=2), encoding="utf-8")

    return settings_path, openapi_path
