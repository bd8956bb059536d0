# dbox_auth.py
import secrets
import hashlib
import base64
import webbrowser
import urllib.parse
from typing import Optional
import requests

AUTHORIZE_URL = "https://www.dropbox.com/oauth2/authorize"
TOKEN_URL = "https://api.dropboxapi.com/oauth2/token"


def generate_pkce_challenge():
    """Generates a code verifier and a code challenge for PKCE."""
    code_verifier = secrets.token_urlsafe(64)
    hashed = hashlib.sha256(code_verifier.encode('utf-8')).digest()
    code_challenge = base64.urlsafe_b64encode(hashed).decode('utf-8').replace('=', '')
    return code_verifier, code_challenge


def parse_auth_code(redirect_url: str) -> Optional[str]:
    """Extracts the authorization code from the URL Dropbox redirected to."""
    query_params = urllib.parse.parse_qs(urllib.parse.urlparse(redirect_url).query)
    return query_params.get('code', [None])[0]


def get_refresh_token(app_key: str) -> Optional[str]:
    """
    Guides the user through the Dropbox OAuth2 PKCE flow to get a refresh token.
    Returns None when no token could be obtained.
    """
    code_verifier, code_challenge = generate_pkce_challenge()

    auth_params = {
        'client_id': app_key,
        'response_type': 'code',
        'code_challenge': code_challenge,
        'code_challenge_method': 'S256',
        'token_access_type': 'offline',
    }
    auth_url = AUTHORIZE_URL + "?" + urllib.parse.urlencode(auth_params)

    print("--- Dropbox Authorization ---")
    print("\n1. A browser window will open. Please authorize the application.")
    print("\n2. After authorization, you will be redirected to a blank page.")
    print("   Copy the FULL URL from your browser's address bar.\n")

    webbrowser.open(auth_url)

    redirect_url_str = input("3. Paste the full redirect URL here and press Enter:\n")

    auth_code = parse_auth_code(redirect_url_str)
    if not auth_code:
        print("\nError: Could not find 'code' in the provided URL.")
        return None

    # --- Exchange authorization code for a refresh token ---
    token_params = {
        'grant_type': 'authorization_code',
        'code': auth_code,
        'client_id': app_key,
        'code_verifier': code_verifier,
    }

    try:
        response = requests.post(TOKEN_URL, data=token_params)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        print(f"\nAn error occurred during the token exchange: {e}")
        return None

    refresh_token = response.json().get('refresh_token')
    if not refresh_token:
        print("\nError: Did not receive a refresh token from Dropbox.")
        return None
    return refresh_token
