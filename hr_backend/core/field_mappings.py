"""Static Lark Base field tables for each HR pipeline stage.

Every entry maps the column name used in Lark Base to the key used by the
API.  ``is_date`` marks columns stored as epoch timestamps that must be
rendered as ISO dates on the way out.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FieldMapping:
    lark_field: str
    our_field: str
    is_date: bool = False


MANPOWER_FIELDS: list[FieldMapping] = [
    FieldMapping("Request No", "requestNo"),
    FieldMapping("Candidate Name", "candidateName"),
    FieldMapping("Status", "status"),
    FieldMapping("Approval Process", "approvalProcess"),
    FieldMapping("Submitted at", "submittedAt", is_date=True),
    FieldMapping("Completed at", "completedAt", is_date=True),
    FieldMapping("Title", "title"),
    FieldMapping("Department", "department"),
    FieldMapping("Position / Title", "position"),
    FieldMapping("Rank", "rank"),
    FieldMapping("Required Start Date", "requiredStartDate", is_date=True),
    FieldMapping("Reason of Recruitment", "reasonOfRecruitment"),
    FieldMapping("New Headcount Needed", "newHeadcountNeeded"),
    FieldMapping("Job Description", "jobDescription"),
    FieldMapping("Employment Type", "employmentType"),
    FieldMapping("Reason to Recruit", "reasonToRecruit"),
    FieldMapping("Existing Position Headcount", "existingPositionHeadcount"),
    FieldMapping("Job Requirements", "jobRequirements"),
    FieldMapping("Initiator Department", "initiatorDepartment"),
]

RECRUITMENT_FIELDS: list[FieldMapping] = [
    FieldMapping("Recruitment", "recruitmentId"),
    FieldMapping("Status", "status"),
    FieldMapping("Candidate Name", "candidateName"),
    FieldMapping("Requestor", "requestor"),
    FieldMapping("Hiring Manager", "hiringManager"),
    FieldMapping("Hiring Position", "hiringPosition"),
    FieldMapping("Head Count", "headCount"),
    FieldMapping("Recruitment Start Date", "recruitmentStartDate", is_date=True),
    FieldMapping("Commencement Date", "commencementDate", is_date=True),
    FieldMapping("Candidate Info", "candidateInfo"),
]

CANDIDATE_FIELDS: list[FieldMapping] = [
    FieldMapping("Candidate ID", "candidateId"),
    FieldMapping("Candidate Name", "candidateName"),
    FieldMapping("Position Applied", "positionApplied"),
    FieldMapping("Submission Channel", "submissionChannel"),
    FieldMapping("Interview Progress", "interviewProgress"),
    FieldMapping("Resume Evaluation", "resumeEvaluation"),
    FieldMapping("Status", "status"),
    FieldMapping("Commencement Date", "commencementDate", is_date=True),
    FieldMapping("Hiring Manager", "hiringManager"),
    FieldMapping("Salary Offered (RM)", "salaryOffered"),
    FieldMapping("Recruitment Progress", "recruitmentProgress"),
]

ONBOARDING_FIELDS: list[FieldMapping] = [
    FieldMapping("OnboardingID", "onboardingId"),
    FieldMapping("Full Name", "fullName"),
    FieldMapping("Incoming Status", "incomingStatus"),
    FieldMapping("Commencement Date", "commencementDate", is_date=True),
    FieldMapping("Department", "department"),
    FieldMapping("Position", "position"),
    FieldMapping("Offer Letter", "offerLetter"),
    FieldMapping("Pre-employment", "preEmployment"),
    FieldMapping("Rank Chart", "rankChart"),
    FieldMapping("Org Chart", "orgChart"),
    FieldMapping("P-file", "pFile"),
    FieldMapping("HR Confirmation", "hrConfirmation"),
    FieldMapping("Lark and InfoTech Acc", "larkAccount"),
    FieldMapping("Email Creation", "emailCreation"),
    FieldMapping("Access Assignment", "accessAssignment"),
    FieldMapping("Asset Assignment", "assetAssignment"),
    FieldMapping("Admin Confirmation", "adminConfirmation"),
    FieldMapping("Manager Confirmation", "managerConfirmation"),
    FieldMapping("Probation Pass", "probationPass"),
    FieldMapping("Completed", "completed"),
    FieldMapping("Company Email", "companyEmail"),
    FieldMapping("Probation Start Date", "probationStartDate", is_date=True),
    FieldMapping("Probation End Date", "probationEndDate"),
]

OFFBOARDING_FIELDS: list[FieldMapping] = [
    FieldMapping("OffboardingID", "offboardingId"),
    FieldMapping("Full Name (Nick name)", "fullName"),
    FieldMapping("Company", "company"),
    FieldMapping("Last Working Day", "lastWorkingDay", is_date=True),
    FieldMapping("Rank Chart", "rankChart"),
    FieldMapping("Org Chart", "orgChart"),
    FieldMapping("P-File", "pFile"),
    FieldMapping("Exit Interview", "exitInterview"),
    FieldMapping("Handover Form", "handoverForm"),
    FieldMapping("HR Confirmation", "hrConfirmation"),
    FieldMapping("Name Card", "nameCard"),
    FieldMapping("Access Assignment", "accessAssignment"),
    FieldMapping("Asset Assignment", "assetAssignment"),
    FieldMapping("Lark and InfoTech Acc", "larkAccount"),
    FieldMapping("Admin Confirmation", "adminConfirmation"),
    FieldMapping("Finance Confirmation", "financeConfirmation"),
    FieldMapping("Manager Confirmation", "managerConfirmation"),
    FieldMapping("Offboard Reason", "offboardReason"),
    FieldMapping("Offboarded", "offboarded"),
    FieldMapping("Email (personal)", "personalEmail"),
]

EMPLOYEE_FIELDS: list[FieldMapping] = [
    FieldMapping("UUID", "uuid"),
    FieldMapping("Full Name", "full_name"),
    FieldMapping("Nickname (WF)", "nickname"),
    FieldMapping("Company", "company"),
    FieldMapping("Gender", "gender"),
    FieldMapping("Job Title", "job_title"),
    FieldMapping("Primary Department", "primary_department"),
    FieldMapping("Status", "status"),
    FieldMapping("Offboarding Status", "offboarding_status"),
    FieldMapping("Date of Joining", "date_of_joining", is_date=True),
    FieldMapping("Work Email", "work_email"),
    FieldMapping("Business Email", "business_email"),
    FieldMapping("Phone Number", "phone_number"),
    FieldMapping("Workforce Type", "workforce_type"),
    FieldMapping("Seats", "seats"),
    FieldMapping("Nationality", "nationality"),
    FieldMapping("City", "city"),
    FieldMapping("Marital Status", "marital_status"),
    FieldMapping("Contract Type", "contract_type"),
    FieldMapping("Education Level", "education_level"),
]

# Auto-id, link, email, formula, lookup and person columns; Lark rejects writes to them.
EMPLOYEE_READ_ONLY_FIELDS: tuple[str, ...] = (
    "UUID",
    "Nationality",
    "Work Email",
    "Offboarding ID",
    "Onboarding ID",
    "Job Category",
    "Length Of Service",
    "Direct Manager ( Person )",
)

ONBOARDING_CHECKLIST: tuple[str, ...] = (
    "offerLetter",
    "preEmployment",
    "rankChart",
    "orgChart",
    "pFile",
    "hrConfirmation",
    "larkAccount",
    "emailCreation",
    "accessAssignment",
    "assetAssignment",
    "adminConfirmation",
    "managerConfirmation",
)

OFFBOARDING_CHECKLIST: tuple[str, ...] = (
    "exitInterview",
    "handoverForm",
    "hrConfirmation",
    "adminConfirmation",
    "financeConfirmation",
    "managerConfirmation",
    "larkAccount",
    "accessAssignment",
    "assetAssignment",
)


def our_fields(mappings: list[FieldMapping]) -> list[str]:
    return [mapping.our_field for mapping in mappings]
