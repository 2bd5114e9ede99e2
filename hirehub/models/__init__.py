from .organization import Organization
from .status import ApplicantStatus
from .applicant import Applicant
from .review import ApplicantReview
from .interview import ApplicantInterview
from .employee import Employee
from .notification import Notification
# base and mixins are imported by the above as needed
