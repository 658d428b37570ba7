"""Dashboard API schemas."""

from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel

StationStatus = Literal["available", "occupied", "break", "offline"]
UpcomingStatus = Literal["booked", "confirmed", "checked_in"]
QueueStatus = Literal["waiting", "called", "serving"]
AttentionType = Literal[
    "late_arrival",
    "pending_checkout",
    "walk_in_waiting",
    "low_stock",
    "pending_approval",
    "no_show_risk",
]
Priority = Literal["high", "medium", "low"]
EntityType = Literal["appointment", "customer", "inventory", "expense"]


class QuickStats(BaseModel):
    todayRevenue: float
    revenueChange: float
    appointmentsCompleted: int
    appointmentsRemaining: int
    walkInsServed: int
    averageWaitTime: int
    noShows: int
    occupancyRate: int


class CurrentAppointment(BaseModel):
    id: str
    customerName: str
    serviceName: str
    startTime: str
    endTime: str
    progress: int
    timeRemaining: int


class Station(BaseModel):
    id: str
    name: str
    stylistId: Optional[str] = None
    stylistName: Optional[str] = None
    stylistAvatar: Optional[str] = None
    status: StationStatus
    currentAppointment: Optional[CurrentAppointment] = None


class UpcomingAppointment(BaseModel):
    id: str
    customerName: str
    customerPhone: str
    scheduledTime: str
    services: List[str]
    stylistName: str
    status: UpcomingStatus
    isLate: bool


class WalkInEntry(BaseModel):
    id: str
    tokenNumber: int
    customerName: str
    services: List[str]
    waitTime: int
    status: QueueStatus


class NextUp(BaseModel):
    appointments: List[UpcomingAppointment]
    walkIns: List[WalkInEntry]


class AttentionItem(BaseModel):
    id: str
    type: AttentionType
    priority: Priority
    title: str
    description: str
    entityType: EntityType
    entityId: str
    createdAt: str


class TimelineAppointment(BaseModel):
    id: str
    startTime: str
    endTime: str
    customerName: str
    status: str


class StylistSchedule(BaseModel):
    stylistId: str
    stylistName: str
    avatar: Optional[str] = None
    appointments: List[TimelineAppointment]


class CommandCenterResponse(BaseModel):
    stats: QuickStats
    stations: List[Station]
    nextUp: NextUp
    attentionItems: List[AttentionItem]
    timeline: List[StylistSchedule]


class RevenueSummary(BaseModel):
    today: float
    yesterday: float
    lastWeekSameDay: float
    percentChangeVsYesterday: float
    percentChangeVsLastWeek: float


class AppointmentSummary(BaseModel):
    total: int
    completed: int
    cancelled: int
    noShows: int
    inProgress: int
    upcoming: int


class InventorySummary(BaseModel):
    lowStockCount: int
    expiringCount: int


class StaffSummary(BaseModel):
    presentToday: int
    totalActive: int
    onLeave: int


class OwnerDashboardResponse(BaseModel):
    revenue: RevenueSummary
    appointments: AppointmentSummary
    inventory: InventorySummary
    staff: StaffSummary


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None


class ErrorEnvelope(BaseModel):
    success: Literal[False] = False
    error: ErrorBody


class CommandCenterEnvelope(BaseModel):
    success: Literal[True] = True
    data: CommandCenterResponse


class OwnerDashboardEnvelope(BaseModel):
    success: Literal[True] = True
    data: OwnerDashboardResponse
