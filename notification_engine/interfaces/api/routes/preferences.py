"""Endpoints for reading and changing notification preferences."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from notification_engine.application.use_cases.preferences import (
    EffectivePreference,
    list_preferences,
    update_preference,
)
from notification_engine.domain.entities import User
from notification_engine.domain.exceptions import ThresholdConfigurationError
from notification_engine.infrastructure.database import get_db
from notification_engine.interfaces.api.dependencies import get_active_user
from notification_engine.interfaces.api.schemas import PreferenceRead, PreferenceUpdate

router = APIRouter(
    prefix="/users/{user_id}/notification-preferences", tags=["notification-preferences"]
)


def _to_read_model(preference: EffectivePreference) -> PreferenceRead:
    threshold: dict[str, int | float] | None = None
    if preference.thresholds is not None:
        threshold = preference.thresholds.as_dict()
    elif preference.amount_threshold is not None:
        threshold = {"amount": preference.amount_threshold}
    return PreferenceRead(
        notification_type=preference.notification_type.value,
        in_app_enabled=preference.in_app_enabled,
        email_enabled=preference.email_enabled,
        language=preference.language,
        threshold=threshold,
        is_default=preference.is_default,
    )


@router.get("/", response_model=list[PreferenceRead])
def read_preferences(
    db: Session = Depends(get_db),
    user: User = Depends(get_active_user),
) -> list[PreferenceRead]:
    """Return the effective preference of every notification type."""

    return [_to_read_model(preference) for preference in list_preferences(db, user_id=user.id)]


@router.put("/{notification_type}", response_model=PreferenceRead)
def write_preference(
    notification_type: str,
    preference_in: PreferenceUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_active_user),
) -> PreferenceRead:
    try:
        update_preference(
            db,
            user_id=user.id,
            notification_type=notification_type,
            in_app_enabled=preference_in.in_app_enabled,
            email_enabled=preference_in.email_enabled,
            language=preference_in.language,
            threshold=(
                preference_in.threshold.model_dump(exclude_none=True)
                if preference_in.threshold
                else None
            ),
        )
    except ThresholdConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    for preference in list_preferences(db, user_id=user.id):
        if preference.notification_type.value == notification_type:
            return _to_read_model(preference)
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preference not found")
