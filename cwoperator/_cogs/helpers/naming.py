"""
Naming rules of Kubernetes: DNS labels, port names, length limits.

All functions are pure and deterministic: the same input gives the same name.
"""
import re

# https://kubernetes.io/docs/concepts/overview/working-with-objects/names/#dns-label-names
DNS_LABEL_MAX_LENGTH = 63
DNS_LABEL_PATTERN = re.compile(r'^[a-z0-9]([-a-z0-9]*[a-z0-9])?$')

# IANA_SVC_NAME as validated by K8s for the container & service ports.
PORT_NAME_MAX_LENGTH = 15
PORT_NAME_PATTERN = re.compile(r'^[-a-z0-9]+$')
PORT_NAME_LETTER = re.compile(r'[a-z]')

_DNS_CHAR = re.compile(r'[a-z0-9]')


def truncate(template: str, limit: int, *values: str) -> str:
    """
    Render a ``%s``-template, shortening the values (not the template) to fit.

    The excess is cut from the first values first, so that the constant parts
    of the template (e.g. the ``-headless`` suffix) always remain intact::

        truncate('%s-headless', 14, 'cloudwatch-agent')  # 'cloud-headless'
    """
    result = template % values
    excess = len(result) - limit
    if excess > 0:
        shortened: list[str] = []
        for value in values:
            if excess > 0 and len(value) > excess:
                value, excess = value[:len(value) - excess], 0
            elif excess > 0:
                value, excess = '', excess - len(value)
            shortened.append(value)
        result = template % tuple(shortened)
    return result


def dns_name(name: str) -> str:
    """
    Make a string usable as a DNS label: lowercase, alphanumerics and dashes.

    Invalid characters become dashes in the middle, and ``a`` at the edges.
    """
    chars: list[str] = []
    lowered = name.lower()
    for idx, char in enumerate(lowered):
        if _DNS_CHAR.match(char):
            chars.append(char)
        elif idx == 0 or idx == len(lowered) - 1:
            chars.append('a')
        else:
            chars.append('-')
    return ''.join(chars)


def is_dns_label(name: str) -> bool:
    return len(name) <= DNS_LABEL_MAX_LENGTH and bool(DNS_LABEL_PATTERN.match(name))


def port_name_errors(name: str) -> list[str]:
    """ Explain why the name is not a valid port name; empty if it is valid. """
    errors: list[str] = []
    if len(name) > PORT_NAME_MAX_LENGTH:
        errors.append(f"must be no more than {PORT_NAME_MAX_LENGTH} characters")
    if not PORT_NAME_PATTERN.match(name):
        errors.append("must contain only alpha-numeric characters (a-z, 0-9), and hyphens (-)")
    if '--' in name:
        errors.append("must not contain consecutive hyphens")
    if not PORT_NAME_LETTER.search(name):
        errors.append("must contain at least one letter (a-z)")
    if name.startswith('-') or name.endswith('-'):
        errors.append("must not begin or end with a hyphen")
    return errors


def port_number_errors(number: int) -> list[str]:
    if not 1 <= number <= 65535:
        return ["must be between 1 and 65535, inclusive"]
    return []


def port_name(component: str, number: int) -> str:
    """
    Name a port after its component, e.g. ``otlp/custom`` -> ``otlp-custom``.

    If the component's name cannot be a DNS label, use ``port-<number>``.
    """
    if len(component) > DNS_LABEL_MAX_LENGTH:
        return f'port-{number}'
    candidate = component.replace('/', '-')
    if is_dns_label(candidate):
        return candidate
    return f'port-{number}'
