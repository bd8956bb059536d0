# gdrive_auth.py
import os
import json
from typing import Optional
from google_auth_oauthlib.flow import InstalledAppFlow

# The scope for Google Drive API
SCOPES = ["https://www.googleapis.com/auth/drive"]


def gdrive_authenticate(credentials_json: Optional[str] = None) -> Optional[str]:
    """
    Handles the OAuth 2.0 flow for Google Drive API.
    Uses the given OAuth client config, or prompts the user for the path to
    their credentials.json file, and returns the authorized-user token as JSON.
    """
    if credentials_json:
        creds_data = json.loads(credentials_json)
    else:
        creds_path = input("Please enter the path to your credentials.json file: ")
        if not os.path.exists(creds_path):
            print("Error: The provided path to credentials.json is invalid.")
            return None
        with open(creds_path, "r") as creds_file:
            creds_data = json.load(creds_file)

    flow = InstalledAppFlow.from_client_config(creds_data, SCOPES)
    creds = flow.run_local_server(port=0)
    return creds.to_json()
