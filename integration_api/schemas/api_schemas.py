"""
API Request/Response Schemas using Pydantic.

Required fields are declared optional here on purpose: missing values are
reported by the application validators as ValidationError with the
"Please provide <field>" message rather than as a framework 422.
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional, Union


class ErrorResponse(BaseModel):
    code: str = Field(..., description="HTTP status code as a string")
    message: str = Field(..., description="Error description")


class AcceptedResponse(BaseModel):
    Code201: str = Field("Received!", description="Acknowledgement text")
    responseCode: int = Field(201, description="HTTP status code of the acknowledgement")


# Account schemas
class AccountRecord(BaseModel):
    Id: Optional[str] = Field(None, description="Account record id")
    Name: Optional[str] = Field(None, description="Account name")


# Unit of work schemas
class UnitOfWorkPayload(BaseModel):
    accountName: Optional[str] = Field(None, description="Name of the Account to create")
    firstName: Optional[str] = Field(None, description="Contact first name")
    lastName: Optional[str] = Field(None, description="Contact last name")
    subject: Optional[str] = Field(None, description="Subject of the service Case")
    description: Optional[str] = Field(None, description="Description of the service Case")
    callbackUrl: Optional[str] = Field(None, description="Absolute URL receiving the created record ids")


class CaseIdsSchema(BaseModel):
    serviceCaseId: str
    followupCaseId: str


class UnitOfWorkCallback(BaseModel):
    """Body POSTed to callbackUrl once the unit of work is committed."""
    accountId: str
    contactId: str
    cases: CaseIdsSchema


# PDF schemas
class GeneratePdfPayload(BaseModel):
    filename: Optional[str] = Field(None, description="Name of the generated file, .pdf is appended")
    recordId: Optional[str] = Field(None, description="Record the PDF is published to")
    path: Optional[str] = Field(None, description="URL to render", examples=["https://www.google.com"])
    pageFormat: Optional[str] = Field(None, description="Paper format, e.g. Letter or A4")
    headless: Optional[bool] = Field(None, description="Run the browser headless (default true)")
    puppeteerProduct: Optional[str] = Field(None, description="Browser product, chrome only")
    revisionInfo: Optional[str] = Field(None, description="Ignored, the browser revision is set by deployment")
    incognito: Optional[bool] = Field(None, description="Render in a fresh 1920x1080 context")
    emulateMediaType: Optional[str] = Field(None, description="print, screen or blank")
    waitUntil: Optional[str] = Field(None, description="load, domcontentloaded, networkidle0 or networkidle2")
    autoScroll: Optional[bool] = Field(None, description="Scroll to the bottom before rendering")
    fitWindow: Optional[bool] = Field(None, description="Fit the viewport to width and height")
    mobile: Optional[bool] = Field(None, description="Emulate a mobile viewport")
    width: Optional[Union[str, int]] = Field(None, description="Page width, unlabeled values are pixels")
    height: Optional[Union[str, int]] = Field(None, description="Page height, unlabeled values are pixels")
    margin: Optional[Union[str, int, Dict[str, Any]]] = Field(None, description="Page margins")
    scale: Optional[float] = Field(None, description="Rendering scale between 0.1 and 2")
    preferCSSPageSize: Optional[bool] = Field(None, description="Prefer CSS @page size")
    displayHeaderFooter: Optional[bool] = Field(None, description="Render header and footer templates")
    headerTemplate: Optional[str] = Field(None, description="HTML header template")
    footerTemplate: Optional[str] = Field(None, description="HTML footer template")
    printBackground: Optional[bool] = Field(None, description="Print background graphics")
    landscape: Optional[bool] = Field(None, description="Landscape orientation")
    pageRanges: Optional[str] = Field(None, description="Page ranges, e.g. '1-5'")
