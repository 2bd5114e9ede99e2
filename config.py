import json
import os
from dotenv import load_dotenv
load_dotenv()


def _json_env(name, default):
    raw = os.getenv(name)
    if not raw:
        return default
    return json.loads(raw)


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///hiring.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    # mail
    SENDGRID_API_KEY = os.getenv("SENDGRID_API_KEY")
    MAIL_FROM = os.getenv("MAIL_FROM", "careers@example.com")
    MAIL_FROM_NAME = os.getenv("MAIL_FROM_NAME", "Hiring Team")

    # document storage
    STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local")
    LOCAL_STORAGE_DIR = os.getenv("LOCAL_STORAGE_DIR", "./storage")
    S3_ENDPOINT = os.getenv("S3_ENDPOINT")
    S3_REGION = os.getenv("S3_REGION")
    S3_BUCKET = os.getenv("S3_BUCKET")
    S3_ACCESS_KEY = os.getenv("S3_ACCESS_KEY")
    S3_SECRET_KEY = os.getenv("S3_SECRET_KEY")
    GOOGLE_API_TOKEN = os.getenv("GOOGLE_API_TOKEN")

    # collaborators
    SLACK_TOKEN = os.getenv("SLACK_TOKEN")
    DOCUSIGN_BASE_URL = os.getenv("DOCUSIGN_BASE_URL", "https://na3.docusign.net/restapi/v2.1")
    DOCUSIGN_ACCOUNT_ID = os.getenv("DOCUSIGN_ACCOUNT_ID")
    DOCUSIGN_TOKEN = os.getenv("DOCUSIGN_TOKEN")
    CHECKR_API_KEY = os.getenv("CHECKR_API_KEY")
    AIRTABLE_API_KEY = os.getenv("AIRTABLE_API_KEY")
    GOOGLE_GEOCODE_KEY = os.getenv("GOOGLE_GEOCODE_KEY")
    GITHUB_TOKEN = os.getenv("GITHUB_TOKEN")
    HTTP_TIMEOUT_SEC = int(os.getenv("HTTP_TIMEOUT_SEC", "30"))
    HTTP_RETRIES = int(os.getenv("HTTP_RETRIES", "3"))

    # hiring pipeline
    COMPANY_NAME = os.getenv("COMPANY_NAME", "Oxide")
    APPLY_BASE_URL = os.getenv("APPLY_BASE_URL", "https://apply.example.com")
    HIRING_SHEETS = _json_env("HIRING_SHEETS", {})
    HIRING_SHEET_RANGE = os.getenv("HIRING_SHEET_RANGE", "Form Responses 1!A1:Z1000")
    ESIGN_SIGNERS = _json_env("ESIGN_SIGNERS", {
        "officer": {"name": "Chief Executive", "email": "ceo@example.com"},
        "hr": {"name": "People Operations", "email": "people@example.com"},
    })
    ESIGN_OFFER_TEMPLATE = os.getenv("ESIGN_OFFER_TEMPLATE", "Employee Offer Letter (US)")
    ESIGN_AGREEMENTS_TEMPLATE = os.getenv("ESIGN_AGREEMENTS_TEMPLATE", "Employee Agreements (Mediation, PIIA)")
    OFFER_DOCUMENTS_FOLDER = os.getenv("OFFER_DOCUMENTS_FOLDER", "Offer Letters")
    PHONE_COUNTRY_HINTS = _json_env("PHONE_COUNTRY_HINTS", None)
    MATERIALS_FILE_SUFFIXES = _json_env("MATERIALS_FILE_SUFFIXES", [
        "responses.pdf",
        "Oxide Candidate Materials.pdf",
        "Oxide Candidate Materials.pdf.pdf",
        "OxideQuestions.pdf",
        "oxide-computer-candidate-materials.pdf",
        "Questionnaire.pdf",
        "questionnaire.md",
        "Questionairre.pdf",
        "Operations Manager.pdf",
        "README.md",
    ])
    # a member name containing one of these and ending in .pdf is materials
    MATERIALS_FILE_MARKERS = _json_env("MATERIALS_FILE_MARKERS", [
        "Oxide Candidate Materials",
        "Oxide_Candidate_Materials",
    ])
    MATERIALS_BOILERPLATE = _json_env("MATERIALS_BOILERPLATE", [
        "________________",
        "Oxide Candidate Materials: Technical Program Manager",
        "Oxide Candidate Materials",
        "Work sample(s)",
    ])
    EXTRACTION_FRESH_DAYS = int(os.getenv("EXTRACTION_FRESH_DAYS", "2"))
    EXTRACTION_STALE_DAYS = int(os.getenv("EXTRACTION_STALE_DAYS", "20"))
    EXTRACT_TIMEOUT_SEC = int(os.getenv("EXTRACT_TIMEOUT_SEC", "120"))
