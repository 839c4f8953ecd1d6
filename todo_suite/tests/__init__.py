"""
Ordered scenarios against the todo application.

Scenario Order:
    00 - Frontend (login, fill the list up to the limit, verify the limit)
    01 - Backend (authenticated GET derived from the OpenAPI document)

The backend scenario reuses the token the frontend login persisted into
settings.json; its session_token fixture logs in again when none is stored.
"""
