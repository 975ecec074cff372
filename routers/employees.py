"""Employee CRUD endpoints."""

import structlog
from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status

from db import (
    count_employees,
    delete_employee,
    fetch_employee,
    find_employees,
    insert_employee,
    update_employee,
)
from list_query import ParseError, build_list_query, parse_age, parse_list_params, total_pages
from uploads import discard_upload, save_upload

router = APIRouter()
logger = structlog.get_logger("hr.employees")

_REQUIRED_FIELDS = ("name", "age", "skills", "address", "designation")


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")


def _store_error(message: str, exc: Exception) -> HTTPException:
    logger.error("store_error", operation=message, error=str(exc), exc_type=type(exc).__name__)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"message": message, "error": str(exc)},
    )


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def _checked_age(raw: str) -> int:
    age = parse_age(raw.strip())
    if age is None:
        raise _bad_request("Invalid age value")
    return age


@router.get("", tags=["employees"])
def list_employees(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    search: str | None = Query(None),
    sort_field: str | None = Query(None, alias="sortField"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    filter_name: str | None = Query(None, alias="filterName"),
    filter_age: str | None = Query(None, alias="filterAge"),
    filter_skills: str | None = Query(None, alias="filterSkills"),
    filter_address: str | None = Query(None, alias="filterAddress"),
    filter_designation: str | None = Query(None, alias="filterDesignation"),
):
    """
    Search, filter, sort and paginate employees.
    Every parameter is taken as raw text and validated by list_query.
    """
    result = parse_list_params(
        {
            "page": page,
            "limit": limit,
            "search": search,
            "sortField": sort_field,
            "sortOrder": sort_order,
            "filterName": filter_name,
            "filterAge": filter_age,
            "filterSkills": filter_skills,
            "filterAddress": filter_address,
            "filterDesignation": filter_designation,
        }
    )
    if isinstance(result, ParseError):
        raise _bad_request(result.message)

    query = build_list_query(result.params)
    # Fetch and count are separate reads; total may drift from the page under concurrent writes.
    try:
        employees = find_employees(query.clauses, query.sort, skip=query.skip, limit=query.limit)
        total = count_employees(query.clauses)
    except Exception as exc:
        raise _store_error("Error fetching employees", exc) from exc

    return {
        "employees": employees,
        "totalPages": total_pages(total, query.limit),
        "currentPage": query.page,
        "total": total,
    }


@router.get("/{employee_id}", tags=["employees"])
def get_employee(employee_id: str):
    try:
        employee = fetch_employee(employee_id)
    except Exception as exc:
        raise _store_error("Error fetching employee", exc) from exc
    if employee is None:
        raise _not_found()
    return employee


@router.post("", status_code=status.HTTP_201_CREATED, tags=["employees"])
def create_employee(
    name: str | None = Form(None),
    age: str | None = Form(None),
    skills: str | None = Form(None),
    address: str | None = Form(None),
    designation: str | None = Form(None),
    profileImage: UploadFile | None = File(None),
):
    """Create an employee from multipart form data, with an optional profile image."""
    if not all(value and value.strip() for value in (name, age, skills, address, designation)):
        raise _bad_request("All fields are required")

    fields = {
        "name": name,
        "age": _checked_age(age),
        "skills": skills,
        "address": address,
        "designation": designation,
    }
    image_path = save_upload(profileImage)
    fields["profileImage"] = image_path or ""

    try:
        employee = insert_employee(fields)
    except Exception as exc:
        discard_upload(image_path)
        raise _store_error("Error creating employee", exc) from exc

    logger.info("employee_created", employee_id=employee["id"])
    return {"message": "Employee created successfully", "employee": employee}


@router.put("/{employee_id}", tags=["employees"])
def update_employee_route(
    employee_id: str,
    name: str | None = Form(None),
    age: str | None = Form(None),
    skills: str | None = Form(None),
    address: str | None = Form(None),
    designation: str | None = Form(None),
    profileImage: UploadFile | None = File(None),
):
    """Replace the supplied fields only; the image changes only when a new file is sent."""
    supplied = {
        key: value
        for key, value in zip(_REQUIRED_FIELDS, (name, age, skills, address, designation))
        if value is not None
    }
    if any(not value.strip() for value in supplied.values()):
        raise _bad_request("Fields cannot be empty")
    if "age" in supplied:
        supplied["age"] = _checked_age(supplied["age"])

    image_path = save_upload(profileImage)
    if image_path:
        supplied["profileImage"] = image_path

    try:
        employee = update_employee(employee_id, supplied)
    except Exception as exc:
        discard_upload(image_path)
        raise _store_error("Error updating employee", exc) from exc

    if employee is None:
        discard_upload(image_path)
        raise _not_found()

    logger.info("employee_updated", employee_id=employee_id, fields=sorted(supplied))
    return {"message": "Employee updated successfully", "employee": employee}


@router.delete("/{employee_id}", tags=["employees"])
def delete_employee_route(employee_id: str):
    try:
        employee = delete_employee(employee_id)
    except Exception as exc:
        raise _store_error("Error deleting employee", exc) from exc
    if employee is None:
        raise _not_found()

    logger.info("employee_deleted", employee_id=employee_id)
    return {"message": "Employee deleted successfully"}
