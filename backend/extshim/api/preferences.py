from fastapi import APIRouter, Depends, HTTPException, status

from extshim.api.notification_schemas import PreferenceIn, PreferenceOut
from extshim.services.preferences import PreferenceTypeError, Preferences, get_preferences

router = APIRouter()


@router.get("/{name}", response_model=PreferenceOut)
def read_preference(name: str, prefs: Preferences = Depends(get_preferences)):
    value = prefs.get(name)
    return PreferenceOut(name=name, value=value, exists=value is not None)


@router.put("/{name}", response_model=PreferenceOut)
def write_preference(name: str, payload: PreferenceIn, prefs: Preferences = Depends(get_preferences)):
    try:
        prefs.set(name, payload.value)
    except PreferenceTypeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return PreferenceOut(name=name, value=payload.value, exists=True)


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
def delete_preference(name: str, prefs: Preferences = Depends(get_preferences)) -> None:
    prefs.remove(name)
