import enum


class ApplicantStatus(enum.Enum):
    """Pipeline stage of an applicant.

    Declined, Deferred and GivingOffer are only ever set by humans (via the
    spreadsheet or the workspace); the engine reads them but never derives them.
    """

    NEEDS_TO_BE_TRIAGED = "Needs to be triaged"
    NEXT_STEPS = "Next steps"
    INTERVIEWING = "Interviewing"
    DECLINED = "Declined"
    DEFERRED = "Deferred"
    GIVING_OFFER = "Giving offer"
    ONBOARDING = "Onboarding"
    HIRED = "Hired"
    CONTRACTOR = "Contractor"

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, raw):
        """Map a free-text status cell to a status; unknown text is untriaged."""
        s = (raw or "").strip().lower()
        if not s:
            return cls.NEEDS_TO_BE_TRIAGED
        for status in cls:
            if s == status.value.lower():
                return status
        # humans annotate the cell, e.g. "Declined: did not do materials"
        if s.startswith("next steps"):
            return cls.NEXT_STEPS
        if s.startswith("interviewing"):
            return cls.INTERVIEWING
        if s.startswith("giving offer"):
            return cls.GIVING_OFFER
        if s.startswith("onboarding"):
            return cls.ONBOARDING
        if s.startswith("hired"):
            return cls.HIRED
        if s.startswith("contractor") or s.startswith("consultant"):
            return cls.CONTRACTOR
        if "defer" in s:
            return cls.DEFERRED
        if "declin" in s:
            return cls.DECLINED
        return cls.NEEDS_TO_BE_TRIAGED

    @property
    def color(self):
        match self:
            case ApplicantStatus.NEXT_STEPS | ApplicantStatus.INTERVIEWING:
                return "#4d87ff"
            case ApplicantStatus.DEFERRED | ApplicantStatus.DECLINED:
                return "#ff4d4d"
            case (ApplicantStatus.HIRED | ApplicantStatus.GIVING_OFFER
                  | ApplicantStatus.CONTRACTOR | ApplicantStatus.ONBOARDING):
                return "#4dff88"
            case ApplicantStatus.NEEDS_TO_BE_TRIAGED:
                return "#ffd24d"


# statuses where the reviewers' scores no longer matter and reviews are purged
PRIVATE_STATUSES = frozenset({ApplicantStatus.ONBOARDING, ApplicantStatus.HIRED})
# statuses for which an offer envelope may exist
OFFER_STATUSES = frozenset({ApplicantStatus.GIVING_OFFER, ApplicantStatus.ONBOARDING, ApplicantStatus.HIRED})
