"""Token persistence string.

Only the token and token secret are kept, in the same form-encoded format
providers use: "oauth_token=foo&oauth_token_secret=bar". The string is
opaque to whatever vault stores it.
"""

from .encoding import percent_encode
from .params import OAuthParam, ParameterStore
from .response import dictionary_with_response_string

PERSISTED_KEYS = (OAuthParam.TOKEN, OAuthParam.TOKEN_SECRET)


def persistence_string(params: ParameterStore) -> str:
    """Serialize the token and token secret.

    Unset keys are left out; the order is always token, then secret.
    """
    parts = []
    for key in PERSISTED_KEYS:
        value = params.get(key)
        if value is not None:
            parts.append(f"{key.value}={percent_encode(value)}")
    return "&".join(parts)


def parameters_from_persistence_string(text: str) -> ParameterStore:
    """Restore the token and token secret into a fresh store.

    Unknown keys are ignored and missing keys stay unset.
    """
    values = dictionary_with_response_string(text)
    store = ParameterStore()
    for key in PERSISTED_KEYS:
        store.set(key, values.get(key.value))
    return store
