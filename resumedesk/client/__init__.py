from resumedesk.client.api_client import ResumeDeskClient, error_from_response
from resumedesk.client.cache import ResumeCache
