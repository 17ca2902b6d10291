from typing import Optional

from app.extensions import db
from app.errors import ValidationError
from app.models import Account
from app.helpers.email import normalize_email

def get_or_create_account_for_email(email: str, first_name: str = None, last_name: str = None) -> Account:
    email = normalize_email(email)
    if not email or "@" not in email:
        raise ValidationError("A valid email is required.")

    acct = Account.query.filter_by(email=email).first()
    if acct:
        # Fill in names we didn't have yet, never overwrite
        if first_name and not acct.first_name:
            acct.first_name = first_name
        if last_name and not acct.last_name:
            acct.last_name = last_name
        return acct

    acct = Account(email=email, first_name=first_name, last_name=last_name)
    db.session.add(acct)
    db.session.flush()
    return acct

def find_account_by_email(email: str) -> Optional[Account]:
    email = normalize_email(email)
    if not email:
        return None
    return Account.query.filter_by(email=email).first()
