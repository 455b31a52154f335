from resumedesk.app.models.user import User
from resumedesk.app.models.profile import Profile
from resumedesk.app.models.resume import Resume
