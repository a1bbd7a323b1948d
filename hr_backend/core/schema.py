from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _LarkEntity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    record_id: str = ""


class ChecklistProgress(BaseModel):
    completed: int = 0
    total: int = 0


class ManpowerRequest(_LarkEntity):
    requestNo: str = ""
    candidateName: str = ""
    status: str = ""
    approvalProcess: str = ""
    submittedAt: str = ""
    completedAt: str = ""
    title: str = ""
    department: str = ""
    position: str = ""
    rank: str = ""
    requiredStartDate: str = ""
    reasonOfRecruitment: str = ""
    newHeadcountNeeded: str = ""
    jobDescription: str = ""
    employmentType: str = ""
    reasonToRecruit: str = ""
    existingPositionHeadcount: str = ""
    jobRequirements: str = ""
    initiatorDepartment: str = ""


class RecruitmentProgress(_LarkEntity):
    recruitmentId: str = ""
    status: str = ""
    candidateName: str = ""
    requestor: str = ""
    hiringManager: str = ""
    hiringPosition: str = ""
    headCount: str = ""
    recruitmentStartDate: str = ""
    commencementDate: str = ""
    candidateInfo: str = ""


class Candidate(_LarkEntity):
    candidateId: str = ""
    candidateName: str = ""
    positionApplied: str = ""
    submissionChannel: str = ""
    interviewProgress: str = ""
    resumeEvaluation: str = ""
    status: str = ""
    commencementDate: str = ""
    hiringManager: str = ""
    salaryOffered: str = ""
    recruitmentProgress: str = ""


class OnboardingRecord(_LarkEntity):
    onboardingId: str = ""
    fullName: str = ""
    incomingStatus: str = ""
    commencementDate: str = ""
    department: str = ""
    position: str = ""
    offerLetter: str = ""
    preEmployment: str = ""
    rankChart: str = ""
    orgChart: str = ""
    pFile: str = ""
    hrConfirmation: str = ""
    larkAccount: str = ""
    emailCreation: str = ""
    accessAssignment: str = ""
    assetAssignment: str = ""
    adminConfirmation: str = ""
    managerConfirmation: str = ""
    probationPass: str = ""
    completed: str = ""
    companyEmail: str = ""
    probationStartDate: str = ""
    probationEndDate: str = ""
    checklist: ChecklistProgress = Field(default_factory=ChecklistProgress)


class OffboardingRecord(_LarkEntity):
    offboardingId: str = ""
    fullName: str = ""
    company: str = ""
    lastWorkingDay: str = ""
    rankChart: str = ""
    orgChart: str = ""
    pFile: str = ""
    exitInterview: str = ""
    handoverForm: str = ""
    hrConfirmation: str = ""
    nameCard: str = ""
    accessAssignment: str = ""
    assetAssignment: str = ""
    larkAccount: str = ""
    adminConfirmation: str = ""
    financeConfirmation: str = ""
    managerConfirmation: str = ""
    offboardReason: str = ""
    offboarded: str = ""
    personalEmail: str = ""
    checklist: ChecklistProgress = Field(default_factory=ChecklistProgress)


class Employee(_LarkEntity):
    uuid: str = ""
    full_name: str = ""
    nickname: str = ""
    company: str = ""
    gender: str = ""
    job_title: str = ""
    primary_department: str = ""
    status: str = ""
    offboarding_status: str = ""
    date_of_joining: str = ""
    work_email: str = ""
    business_email: str = ""
    phone_number: str = ""
    workforce_type: str = ""
    seats: str = ""
    nationality: str = ""
    city: str = ""
    marital_status: str = ""
    contract_type: str = ""
    education_level: str = ""


class ManpowerCounts(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0


class RecruitmentCounts(BaseModel):
    total: int = 0
    in_progress: int = 0
    completed: int = 0


class CandidateCounts(BaseModel):
    total: int = 0
    shortlisted: int = 0
    offered: int = 0


class StageCounts(BaseModel):
    total: int = 0
    in_progress: int = 0
    completed: int = 0


class EmployeeCounts(BaseModel):
    total: int = 0
    active: int = 0


class PipelineStats(BaseModel):
    manpower: ManpowerCounts
    recruitment: RecruitmentCounts
    candidates: CandidateCounts
    onboarding: StageCounts
    employees: EmployeeCounts
    offboarding: StageCounts


class ReportLine(BaseModel):
    section: str
    account_name: str
    value: float
    period: str


class SyncSummary(BaseModel):
    reportId: int | None = None
    synced: int = 0


class SheetPayload(BaseModel):
    name: str
    headers: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)


class SheetExportRequest(BaseModel):
    fileName: str = "export.xlsx"
    format: str | None = None
    sheets: list[SheetPayload] = Field(default_factory=list)
