"""Rule store: rule CRUD plus a shared snapshot of the active rules."""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import Importance, Operator, RuleSource, RuleType
from app.core.exceptions import DuplicateRuleError
from app.models.domain.rule import RuleConfiguration
from app.repositories.rule_repository import RuleRepository
from app.services.rule_engine.base import RuleDefinition

logger = logging.getLogger(__name__)

RuleSnapshot = Tuple[RuleDefinition, ...]

DEFAULT_RULES: List[Dict[str, Any]] = [
    {
        "rule_name": "MINIMUM_CREDIT_SCORE",
        "rule_type": RuleType.CREDIT_SCORE,
        "description": "Credit score must be at least 650",
        "threshold_value": Decimal("650"),
        "operator": Operator.GTE,
        "priority": 1,
        "importance": Importance.CRITICAL,
        "failure_message": "Credit score below minimum threshold",
    },
    {
        "rule_name": "MAXIMUM_LOAN_AMOUNT",
        "rule_type": RuleType.LOAN_AMOUNT,
        "description": "Loan amount must not exceed 1,000,000",
        "threshold_value": Decimal("1000000"),
        "operator": Operator.LTE,
        "priority": 2,
        "importance": Importance.CRITICAL,
        "failure_message": "Loan amount exceeds maximum limit",
    },
    {
        "rule_name": "BUREAU_RESPONSE_VALIDATION",
        "rule_type": RuleType.BUREAU_RESPONSE,
        "description": "At least one credit bureau must respond successfully",
        "threshold_value": Decimal("1"),
        "operator": Operator.GTE,
        "priority": 3,
        "importance": Importance.HIGH,
        "failure_message": "No successful bureau responses received",
    },
]


class RuleSnapshotCache:
    """
    Process-wide cache of the active rule list.

    The snapshot is an immutable tuple replaced as a whole, so readers
    always see either the old or the new rule set. Every invalidation
    bumps a version; a loader may only publish what it loaded if no
    invalidation happened since it started.
    """

    def __init__(self):
        self._snapshot: Optional[RuleSnapshot] = None
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def get(self) -> Optional[RuleSnapshot]:
        return self._snapshot

    def publish(self, rules: RuleSnapshot, loaded_at_version: int) -> bool:
        """Store a freshly loaded snapshot unless it is already stale."""
        if loaded_at_version != self._version:
            return False
        self._snapshot = rules
        return True

    def invalidate(self) -> None:
        self._version += 1
        self._snapshot = None


rule_cache = RuleSnapshotCache()


class RuleStore:
    """
    Rule service for managing decision rules.

    Every mutation commits and then invalidates the active-rule snapshot,
    so the next evaluation sees the new rule set.
    """

    def __init__(self, db: AsyncSession, cache: Optional[RuleSnapshotCache] = None):
        """
        Initialize the rule store.

        Args:
            db: Async database session
            cache: Snapshot cache, defaults to the process-wide one
        """
        self.db = db
        self.repo = RuleRepository(db)
        self.cache = cache or rule_cache

    # ===== Active rule snapshot =====

    async def get_active_rules(self) -> RuleSnapshot:
        """
        Return the enabled rules ordered by priority.

        Served from the snapshot cache; loaded from the database on a miss.
        """
        snapshot = self.cache.get()
        if snapshot is not None:
            return snapshot

        version = self.cache.version
        rules = await self.repo.get_active_rules()
        snapshot = tuple(RuleDefinition.from_model(rule) for rule in rules)
        if self.cache.publish(snapshot, version):
            logger.debug(f"Loaded {len(snapshot)} active rules into cache")
        return snapshot

    async def _commit_and_invalidate(self) -> None:
        await self.db.commit()
        self.cache.invalidate()

    # ===== CRUD =====

    async def get_rule(self, rule_id: UUID) -> Optional[RuleConfiguration]:
        return await self.repo.get_by_id(rule_id)

    async def get_rule_by_name(self, rule_name: str) -> Optional[RuleConfiguration]:
        return await self.repo.get_by_name(rule_name)

    async def list_rules(
        self, enabled_only: bool = False, skip: int = 0, limit: int = 100
    ) -> List[RuleConfiguration]:
        return await self.repo.list_rules(enabled_only=enabled_only, skip=skip, limit=limit)

    async def count_rules(self, enabled_only: bool = False) -> int:
        if enabled_only:
            return await self.repo.count(enabled=True)
        return await self.repo.count()

    async def create_rule(self, **fields: Any) -> RuleConfiguration:
        """
        Create a new rule.

        Args:
            **fields: Rule column values; rule_name must be unique

        Returns:
            Created rule

        Raises:
            DuplicateRuleError: If a rule with the same name exists
        """
        existing = await self.repo.get_by_name(fields["rule_name"])
        if existing:
            raise DuplicateRuleError(
                f"Rule with name '{fields['rule_name']}' already exists"
            )

        fields.setdefault("source", RuleSource.MANUAL)
        try:
            rule = await self.repo.create(**fields)
            await self._commit_and_invalidate()
        except IntegrityError as e:
            # Lost a race with a concurrent create of the same name
            await self.db.rollback()
            raise DuplicateRuleError(
                f"Rule with name '{fields['rule_name']}' already exists"
            ) from e

        logger.info(f"Created rule {rule.rule_name} ({rule.rule_type.value} {rule.operator.value} {rule.threshold_value})")
        return rule

    async def update_rule(self, rule_id: UUID, **fields: Any) -> Optional[RuleConfiguration]:
        """
        Update a rule.

        Returns:
            Updated rule, or None if not found

        Raises:
            DuplicateRuleError: If renamed to a name another rule uses
        """
        new_name = fields.get("rule_name")
        if new_name:
            existing = await self.repo.get_by_name(new_name)
            if existing and existing.id != rule_id:
                raise DuplicateRuleError(f"Rule with name '{new_name}' already exists")

        try:
            rule = await self.repo.update(rule_id, **fields)
            if rule is None:
                return None
            await self._commit_and_invalidate()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateRuleError(f"Rule with name '{new_name}' already exists") from e

        logger.info(f"Updated rule {rule.rule_name}: {sorted(fields)}")
        return rule

    async def toggle_rule(self, rule_id: UUID, enabled: bool) -> Optional[RuleConfiguration]:
        """Enable or disable a rule. Returns None if not found."""
        return await self.update_rule(rule_id, enabled=enabled)

    async def delete_rule(self, rule_id: UUID) -> bool:
        """Delete a rule. Returns False if not found."""
        deleted = await self.repo.delete(rule_id)
        if deleted:
            await self._commit_and_invalidate()
            logger.info(f"Deleted rule {rule_id}")
        return deleted

    async def upsert_model_rule(
        self,
        rule_name: str,
        rule_type: RuleType,
        threshold_value: Decimal,
        operator: Operator,
        description: Optional[str] = None,
        failure_message: Optional[str] = None,
        priority: int = 1,
        importance: Importance = Importance.CRITICAL,
        confidence_score: Optional[Decimal] = None,
        model_version: Optional[str] = None,
        rule_metadata: Optional[dict] = None,
        updated_by: str = "MODEL_INFERENCE",
    ) -> RuleConfiguration:
        """
        Insert or replace a model-proposed rule, matched by name.

        An existing rule keeps its id, enablement and priority; its
        definition and provenance are overwritten.
        """
        fields: Dict[str, Any] = {
            "rule_type": rule_type,
            "threshold_value": threshold_value,
            "operator": operator,
            "description": description,
            "failure_message": failure_message,
            "importance": importance,
            "source": RuleSource.MODEL,
            "confidence_score": confidence_score,
            "model_version": model_version,
            "rule_metadata": rule_metadata,
            "updated_by": updated_by,
        }

        existing = await self.repo.get_by_name(rule_name)
        if existing:
            rule = await self.repo.update(existing.id, **fields)
        else:
            rule = await self.repo.create(
                rule_name=rule_name, enabled=True, priority=priority, **fields
            )

        await self._commit_and_invalidate()
        logger.info(f"Upserted model rule {rule_name} (confidence={confidence_score})")
        return rule

    async def seed_default_rules(self) -> int:
        """
        Insert the default rule set when no rules exist.

        Returns:
            Number of rules created
        """
        if await self.repo.count() > 0:
            return 0

        for definition in DEFAULT_RULES:
            await self.repo.create(source=RuleSource.MANUAL, enabled=True, **definition)

        await self._commit_and_invalidate()
        logger.info(f"Seeded {len(DEFAULT_RULES)} default rules")
        return len(DEFAULT_RULES)
