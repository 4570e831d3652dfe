"""
This module keeps the state of a client between requests, without saving any information on the
server. The state is serialized, encrypted and sent to the client in a cookie.
"""
import base64
import copy
import hashlib
import json
import logging
import time
from collections import UserDict
from lzma import LZMACompressor
from lzma import LZMADecompressor
from uuid import uuid4

from Cryptodome.Cipher import AES
from Cryptodome.Random import get_random_bytes
from werkzeug.http import dump_cookie
from werkzeug.http import parse_cookie

from pymvc.exception import MVCStateError


logger = logging.getLogger(__name__)

_SESSION_ID_KEY = "SESSION_ID"
_ISSUED_AT_KEY = "ISSUED_AT"
_NONCE_LENGTH = 12
_TAG_LENGTH = 16


def _cipher_key(encryption_key):
    """
    :type encryption_key: str
    :rtype: bytes
    :return: a 256 bit AES key derived from the configured secret
    """
    return hashlib.sha256(encryption_key.encode("utf-8")).digest()


class State(UserDict):
    """
    The state of one client. Values must be JSON serializable.
    """

    def __init__(self, cookie_value=None, encryption_key=None, max_age=None):
        """
        An empty state is created if no cookie value is given or if it can't be decrypted.

        :type cookie_value: str | None
        :type encryption_key: str | None
        :type max_age: int | None

        :param cookie_value: a string created by `pack`
        :param encryption_key: the key the value was encrypted with
        :param max_age: seconds a packed state stays valid, no limit if None
        """
        self.delete = False

        data = {}
        if cookie_value:
            if not encryption_key:
                raise ValueError("If a 'cookie_value' is supplied 'encryption_key' must be specified.")
            data = self.unpack(cookie_value, encryption_key, max_age) or {}

        data.setdefault(_SESSION_ID_KEY, uuid4().urn)
        super().__init__(data)

    @property
    def session_id(self):
        return self.data.get(_SESSION_ID_KEY)

    @staticmethod
    def unpack(cookie_value, encryption_key, max_age=None):
        """
        :type cookie_value: str
        :type encryption_key: str
        :type max_age: int | None
        :rtype: dict[str, Any] | None
        :return: the state data, None if the value is invalid or expired
        """
        try:
            raw = base64.urlsafe_b64decode(cookie_value.encode("utf-8"))
            nonce = raw[:_NONCE_LENGTH]
            tag = raw[_NONCE_LENGTH:_NONCE_LENGTH + _TAG_LENGTH]
            ciphertext = raw[_NONCE_LENGTH + _TAG_LENGTH:]
            cipher = AES.new(_cipher_key(encryption_key), AES.MODE_GCM, nonce=nonce)
            decrypted = cipher.decrypt_and_verify(ciphertext, tag)
            data_obj = json.loads(LZMADecompressor().decompress(decrypted))
        except Exception as e:
            error_context = {
                "message": "Failed to load state data. Reinitializing empty state.",
                "reason": str(e),
            }
            logger.warning(error_context)
            return None

        if not isinstance(data_obj, dict):
            logger.warning("State data is not a mapping. Reinitializing empty state.")
            return None

        issued_at = data_obj.get(_ISSUED_AT_KEY)
        if max_age is not None and (
            not isinstance(issued_at, (int, float)) or time.time() - issued_at > max_age
        ):
            logger.debug("State {} expired".format(data_obj.get(_SESSION_ID_KEY)))
            return None
        return data_obj

    def pack(self, encryption_key):
        """
        Returns an url safe, encrypted representation of the state.

        :type encryption_key: str
        :rtype: str
        """
        self.data[_ISSUED_AT_KEY] = int(time.time())
        lzma = LZMACompressor()
        _data = lzma.compress(json.dumps(self.data).encode("utf-8"))
        _data += lzma.flush()

        nonce = get_random_bytes(_NONCE_LENGTH)
        cipher = AES.new(_cipher_key(encryption_key), AES.MODE_GCM, nonce=nonce)
        ciphertext, tag = cipher.encrypt_and_digest(_data)
        return base64.urlsafe_b64encode(nonce + tag + ciphertext).decode("utf-8")

    def copy(self):
        """
        :rtype: pymvc.state.State
        :return: a deep copy of the state
        """
        state_copy = State()
        state_copy.data = copy.deepcopy(self.data)
        return state_copy


def state_to_cookie(state, *, name, path, encryption_key, secure=None, httponly=None, samesite=None,
                    max_age=None):
    """
    Saves a state to a cookie

    :type state: State
    :rtype: str

    :param state: the data to save
    :param name: identifier of the cookie
    :param path: path the cookie will be associated to
    :param encryption_key: the key to use to encrypt the state information
    :param secure: whether the cookie is only sent over a secure channel, True if not given
    :param httponly: whether the cookie is hidden from scripts, True if not given
    :param samesite: SameSite attribute, "Lax" if not given
    :param max_age: lifetime of the cookie in seconds, a session cookie if not given
    :return: a Set-Cookie header value
    """
    cookie = dump_cookie(
        name,
        "" if state.delete else state.pack(encryption_key),
        max_age=0 if state.delete else max_age,
        path=path,
        secure=secure if secure is not None else True,
        httponly=httponly if httponly is not None else True,
        samesite=samesite if samesite is not None else "Lax",
    )
    logger.debug("Saved state {id} in cookie {name}".format(id=state.session_id, name=name))
    return cookie


def cookie_to_state(cookie_str, name, encryption_key, max_age=None):
    """
    Loads a state from a cookie

    :type cookie_str: str
    :type name: str
    :type encryption_key: str
    :type max_age: int | None
    :rtype: State

    :param cookie_str: the Cookie header of the request
    :param name: name of the state cookie
    :param encryption_key: key the state was encrypted with
    :param max_age: seconds a packed state stays valid
    :raise MVCStateError: if the request has no state cookie
    """
    cookies = parse_cookie(cookie_str or "")
    try:
        value = cookies[name]
    except KeyError as e:
        raise MVCStateError("No cookie named {}".format(name)) from e
    return State(value, encryption_key, max_age)
