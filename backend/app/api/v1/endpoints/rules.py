"""Decision rule management endpoints."""

import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    DecisionEvaluationError,
    DuplicateRuleError,
    LLMConfigurationError,
)
from app.deps import get_llm_provider, get_session
from app.models.schemas.rule import (
    RuleCreate,
    RuleInferenceResponse,
    RuleListResponse,
    RuleResponse,
    RuleUpdate,
)
from app.services.llm.providers import LLMProvider
from app.services.rule_inference_service import RuleInferenceService
from app.services.rule_store import RuleStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=RuleListResponse,
    summary="List rules",
    description="Retrieve decision rules ordered by priority",
)
async def list_rules(
    db: Annotated[AsyncSession, Depends(get_session)],
    enabled_only: Annotated[
        bool, Query(description="Filter for enabled rules only")
    ] = False,
    page: Annotated[int, Query(ge=1, description="Page number (1-indexed)")] = 1,
    page_size: Annotated[
        int, Query(ge=1, le=100, description="Number of items per page")
    ] = 50,
) -> RuleListResponse:
    """List rules in evaluation order."""
    store = RuleStore(db)

    skip = (page - 1) * page_size
    rules = await store.list_rules(enabled_only=enabled_only, skip=skip, limit=page_size)
    total = await store.count_rules(enabled_only=enabled_only)
    total_pages = (total + page_size - 1) // page_size if total > 0 else 1

    return RuleListResponse(
        items=[RuleResponse.model_validate(rule) for rule in rules],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
    )


@router.post(
    "",
    response_model=RuleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a rule",
    description="Create a new decision rule",
)
async def create_rule(
    rule_data: RuleCreate,
    db: Annotated[AsyncSession, Depends(get_session)],
) -> RuleResponse:
    """
    Create a new decision rule.

    Example: {"rule_name": "MINIMUM_CREDIT_SCORE", "rule_type": "CREDIT_SCORE",
    "operator": ">=", "threshold_value": 650, "priority": 1}

    Rule names are unique. Unknown rule types or operators are rejected.
    """
    try:
        store = RuleStore(db)
        rule = await store.create_rule(**rule_data.model_dump())
        return RuleResponse.model_validate(rule)

    except DuplicateRuleError as e:
        logger.error(f"Duplicate rule: {str(e)}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        logger.error(f"Validation error creating rule: {str(e)}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating rule: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create rule",
        )


@router.get(
    "/{rule_id}",
    response_model=RuleResponse,
    summary="Get rule by ID",
    description="Retrieve a decision rule by its ID",
)
async def get_rule(
    rule_id: UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
) -> RuleResponse:
    store = RuleStore(db)
    rule = await store.get_rule(rule_id)

    if not rule:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Rule with ID {rule_id} not found",
        )

    return RuleResponse.model_validate(rule)


@router.put(
    "/{rule_id}",
    response_model=RuleResponse,
    summary="Update a rule",
    description="Update a decision rule",
)
async def update_rule(
    rule_id: UUID,
    update_data: RuleUpdate,
    db: Annotated[AsyncSession, Depends(get_session)],
) -> RuleResponse:
    """Partially update a rule. Takes effect for the next evaluation."""
    try:
        store = RuleStore(db)
        update_dict = update_data.model_dump(exclude_unset=True, exclude_none=True)

        rule = await store.update_rule(rule_id, **update_dict)

        if not rule:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Rule with ID {rule_id} not found",
            )

        return RuleResponse.model_validate(rule)

    except HTTPException:
        raise
    except DuplicateRuleError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        logger.error(f"Validation error updating rule: {str(e)}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating rule: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update rule",
        )


@router.delete(
    "/{rule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a rule",
    description="Delete a decision rule",
)
async def delete_rule(
    rule_id: UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
) -> None:
    store = RuleStore(db)
    deleted = await store.delete_rule(rule_id)

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Rule with ID {rule_id} not found",
        )


@router.patch(
    "/{rule_id}/toggle",
    response_model=RuleResponse,
    summary="Enable or disable a rule",
    description="Set a rule's enabled flag",
)
async def toggle_rule(
    rule_id: UUID,
    enabled: Annotated[bool, Query(description="New enabled state")],
    db: Annotated[AsyncSession, Depends(get_session)],
) -> RuleResponse:
    try:
        store = RuleStore(db)
        rule = await store.toggle_rule(rule_id, enabled)

        if not rule:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Rule with ID {rule_id} not found",
            )

        return RuleResponse.model_validate(rule)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error toggling rule: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to toggle rule",
        )


@router.post(
    "/infer/run",
    response_model=RuleInferenceResponse,
    summary="Infer rules from history",
    description="Ask the LLM to propose rules from recent decisions and persist valid ones",
)
async def infer_rules(
    db: Annotated[AsyncSession, Depends(get_session)],
    llm_provider: Annotated[Optional[LLMProvider], Depends(get_llm_provider)],
    sample_size: Annotated[
        int, Query(ge=1, le=500, description="Number of recent decisions to analyze")
    ] = 50,
) -> RuleInferenceResponse:
    """
    Run advisory rule inference.

    Proposed rules are stored with source MODEL and apply to future
    evaluations only. Invalid proposals are skipped and listed.
    """
    try:
        service = RuleInferenceService(db, llm_provider)
        return await service.propose_rules(sample_size)

    except LLMConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except DecisionEvaluationError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except Exception as e:
        logger.error(f"Error inferring rules: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to infer rules",
        )
