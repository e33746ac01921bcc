"""
mock_identity_service.py — Mock Implementation of the Identity Provider (REST API)

This module provides a simulated identity provider for running the painting order
service locally. Accounts and tokens live in memory and vanish on restart.

Simulation Scenarios:
    • Sign-up with immediate session
    • Sign-up requiring email confirmation (local part ending in "+confirm")
    • Rejected sign-in (HTTP 400)

Endpoints:
    POST /auth/v1/signup              — Registers an account.
    POST /auth/v1/token?grant_type=password — Issues an access token.
    POST /auth/v1/logout              — Revokes a bearer token.

Port:
    Default: 8101 (HTTP)
"""

from fastapi import FastAPI, Header, HTTPException
from pydantic import BaseModel
import logging
import uuid

app = FastAPI(title="Mock Identity Provider")
logging.basicConfig(level=logging.INFO)

accounts = {}   # email -> {"id", "email", "password", "full_name"}
tokens = {}     # access token -> email


class Credentials(BaseModel):
    email: str
    password: str
    data: dict = {}


def _user(account: dict) -> dict:
    return {
        "id": account["id"],
        "email": account["email"],
        "user_metadata": {"full_name": account["full_name"]},
    }


def _session(account: dict) -> dict:
    token = f"tok_{uuid.uuid4().hex}"
    tokens[token] = account["email"]
    return {"access_token": token, "token_type": "bearer", "user": _user(account)}


def _bearer(authorization: str) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail={"message": "Missing bearer token."})
    return authorization[len("Bearer "):]


@app.post("/auth/v1/signup")
def sign_up(request: Credentials):
    """
    Registers a new account.

    Returns:
        dict: A session ({"access_token", "user"}), or only {"user"} when the
              email address must be confirmed first.
    Raises:
        HTTPException(422): If the email address is already registered.
    """
    if request.email in accounts:
        raise HTTPException(status_code=422, detail={"message": "User already registered."})

    account = {
        "id": str(uuid.uuid4()),
        "email": request.email,
        "password": request.password,
        "full_name": request.data.get("full_name"),
    }
    accounts[request.email] = account
    logging.info(f"[IDP] Account created for {request.email}.")

    if request.email.split("@")[0].endswith("+confirm"):
        return {"user": _user(account)}
    return _session(account)


@app.post("/auth/v1/token")
def issue_token(request: Credentials, grant_type: str):
    if grant_type != "password":
        raise HTTPException(status_code=400, detail={"message": "Unsupported grant type."})
    account = accounts.get(request.email)
    if account is None or account["password"] != request.password:
        logging.warning(f"[IDP] Invalid login for {request.email}.")
        raise HTTPException(status_code=400, detail={"message": "Invalid login credentials."})
    return _session(account)


@app.post("/auth/v1/logout", status_code=204)
def logout(authorization: str = Header(None)):
    email = tokens.pop(_bearer(authorization), None)
    logging.info(f"[IDP] Logout for {email}.")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8101)
