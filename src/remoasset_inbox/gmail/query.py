"""Gmail search query builder."""

from __future__ import annotations

from typing import Callable


def construct_query(*query_dicts: dict, **query_terms) -> str:
    """
    Constructs a Gmail search query from either:

    (1) Dictionaries representing alternatives to "or" (only one of them
        needs to match).

    (2) Keyword arguments specifying individual terms (each keyword is
        and'd).

    To negate a term, use "exclude_<keyword>" instead of "<keyword>".
    For non-boolean values, use a tuple () for AND or a list [] for OR.

    Keyword Arguments:
        sender, recipient, participant, subject, labels, cc, before, after,
        older_than, newer_than, starred, unread, read, important, in, category
    """
    if query_dicts:
        return _or([construct_query(**query) for query in query_dicts])

    terms = []
    for key, val in query_terms.items():
        exclude = key.startswith('exclude_')
        if exclude:
            key = key[len('exclude_'):]

        try:
            query_fn = _TERMS[key]
        except KeyError:
            raise ValueError(f"Unknown query term: {key!r}") from None
        conjunction = _and if isinstance(val, tuple) else _or

        if key in ('newer_than', 'older_than'):
            if isinstance(val[0], (tuple, list)):
                term = conjunction([query_fn(*v) for v in val])
            else:
                term = query_fn(*val)

        elif key == 'labels':
            term = query_fn(val)

        elif isinstance(val, (tuple, list)):
            term = conjunction([query_fn(v) for v in val])

        elif isinstance(val, bool):
            term = query_fn()

        else:
            term = query_fn(val)

        if exclude:
            term = _exclude(term)

        terms.append(term)

    return _and(terms)


def contact_query(email: str) -> str:
    """Match every message sent by or addressed to ``email``."""
    return construct_query(participant=email.strip())


def _and(queries: list[str]) -> str:
    if len(queries) == 1:
        return queries[0]
    return f'({" ".join(queries)})'


def _or(queries: list[str]) -> str:
    if len(queries) == 1:
        return queries[0]
    return '{' + ' '.join(queries) + '}'


def _exclude(term: str) -> str:
    return f'-{term}'


def _sender(sender: str) -> str:
    return f'from:{sender}'


def _recipient(recipient: str) -> str:
    return f'to:{recipient}'


def _participant(address: str) -> str:
    return _or([_sender(address), _recipient(address)])


def _subject(subject: str) -> str:
    return f'subject:{subject}'


def _labels(labels: list[str] | str) -> str:
    if isinstance(labels, str):
        return _label(labels)
    return _and([_label(label) for label in labels])


def _label(label: str) -> str:
    return f'label:{label}'


def _cc(recipient: str) -> str:
    return f'cc:{recipient}'


def _after(date: str) -> str:
    return f'after:{date}'


def _before(date: str) -> str:
    return f'before:{date}'


def _older_than(number: int, unit: str) -> str:
    return f'older_than:{number}{unit[0]}'


def _newer_than(number: int, unit: str) -> str:
    return f'newer_than:{number}{unit[0]}'


def _starred() -> str:
    return 'is:starred'


def _unread() -> str:
    return 'is:unread'


def _read() -> str:
    return 'is:read'


def _important() -> str:
    return 'is:important'


def _in(folder_name: str) -> str:
    return f'in:{folder_name}'


def _category(category: str) -> str:
    return f'category:{category}'


_TERMS: dict[str, Callable[..., str]] = {
    'sender': _sender,
    'recipient': _recipient,
    'participant': _participant,
    'subject': _subject,
    'labels': _labels,
    'cc': _cc,
    'after': _after,
    'before': _before,
    'older_than': _older_than,
    'newer_than': _newer_than,
    'starred': _starred,
    'unread': _unread,
    'read': _read,
    'important': _important,
    'in': _in,
    'category': _category,
}
