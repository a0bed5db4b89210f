"""
op-picker - Secret Resolver

Drives item and field selection and applies the single-secret fast path.
"""

from typing import Optional

from ..core.common_utils import CommonUtils
from ..core.selector import SelectorBase
from ..secret_managers.base import SecretStoreBase
from .log_manager import PickerLogger


class SecretResolver:
  def __init__(self, log_manager: PickerLogger, secret_store: SecretStoreBase, selector: SelectorBase) -> None:
    self.logger = log_manager.get_logger(name="secret_resolver", component="resolver")
    self.secret_store = secret_store
    self.selector = selector

  def resolve(self, token: str, choose: bool = False) -> Optional[str]:
    """
    Let the user pick an item (and a field when needed) and return the secret.

    Args:
        token: Session token
        choose: Always ask for the field, even for single-secret items

    Returns:
        The secret value, or None if a selection prompt was dismissed.
    """
    items = self.secret_store.list_items(token)
    by_label = {}
    for item in items:
      label = item.label
      if label in by_label:
        label = f"{label} ({item.id})"
      by_label[label] = item

    chosen = self.selector.select(list(by_label), prompt="item")
    if chosen is None or chosen not in by_label:
      self.logger.debug("No item selected")
      return None
    item = by_label[chosen]

    if not choose:
      # Any failure here (no concealed field, several of them, a transient
      # error) falls through to the field list.
      value = self.secret_store.get_concealed(token, item.id)
      if value:
        self.logger.info(f"Resolved sole concealed field of item {item.id}")
        return value

    fields = self.secret_store.list_fields(token, item.id)
    field = self.selector.select(fields, prompt="field")
    if field is None:
      self.logger.debug("No field selected")
      return None

    value = self.secret_store.get_field(token, item.id, field)
    if CommonUtils.is_otp_uri(value):
      self.logger.info(f"Field '{field}' is an OTP URI, generating a code")
      value = self.secret_store.get_otp(token, item.id)

    self.logger.info(f"Resolved field '{field}' of item {item.id}")
    return CommonUtils.strip_quotes(value)
