"""
Built-in Transform Rules

This module centralizes the regex rules applied by the transform engine.
All rules are:
- Ordered: later rules see the output of earlier ones
- Declarative: plain TransformRule records, no logic
- Exportable: the sample configuration is generated from these lists

Patterns use ECMAScript regex syntax and $n replacement tokens so that
rule files can be shared with the Node.js converter.
"""

from typing import Dict, List, Any

from .models import TransformRule, TransformConfig


# ============================================================================
# PREPROCESS RULES (applied to the raw collection JSON text)
# ============================================================================

DEFAULT_PREPROCESS_RULES: List[TransformRule] = [
    TransformRule(
        name="deprecated-pm-syntax",
        description="Fix deprecated Postman responseHeaders syntax",
        pattern=r"\bpm\.responseHeaders\[(.*?)\]",
        replacement="pm.response.headers.get($1)",
    ),
    TransformRule(
        name="old-postman-vars",
        description="Convert old postman.getEnvironmentVariable calls",
        pattern=r"\bpostman\.getEnvironmentVariable\((.*?)\)",
        replacement="pm.environment.get($1)",
    ),
    TransformRule(
        name="old-postman-global-vars",
        description="Convert old postman.getGlobalVariable calls",
        pattern=r"\bpostman\.getGlobalVariable\((.*?)\)",
        replacement="pm.globals.get($1)",
    ),
    TransformRule(
        name="legacy-test-syntax",
        description="Convert legacy test syntax",
        pattern=r"\btests\[(.*?)\]\s*=\s*(.*?);",
        replacement="pm.test($1, function() { pm.expect($2).to.be.true; });",
    ),
    TransformRule(
        name="legacy-environment-set",
        description="Convert postman.setEnvironmentVariable to pm.environment.set",
        pattern=r"\bpostman\.setEnvironmentVariable\s*\(\s*(.+?)\s*,\s*(.+?)\s*\)",
        replacement="pm.environment.set($1, $2)",
    ),
    TransformRule(
        name="legacy-global-set",
        description="Convert postman.setGlobalVariable to pm.globals.set",
        pattern=r"\bpostman\.setGlobalVariable\s*\(\s*(.+?)\s*,\s*(.+?)\s*\)",
        replacement="pm.globals.set($1, $2)",
    ),
    TransformRule(
        name="legacy-clear-env",
        description="Convert postman.clearEnvironmentVariable to pm.environment.unset",
        pattern=r"\bpostman\.clearEnvironmentVariable\s*\(\s*(.+?)\s*\)",
        replacement="pm.environment.unset($1)",
    ),
    TransformRule(
        name="legacy-clear-global",
        description="Convert postman.clearGlobalVariable to pm.globals.unset",
        pattern=r"\bpostman\.clearGlobalVariable\s*\(\s*(.+?)\s*\)",
        replacement="pm.globals.unset($1)",
    ),
    TransformRule(
        name="responseCode-to-response",
        description="Convert responseCode.code to pm.response.code",
        pattern=r"\bresponseCode\.code",
        replacement="pm.response.code",
    ),
]


# ============================================================================
# POSTPROCESS RULES (applied to generated insomnia.* scripts)
# ============================================================================

DEFAULT_POSTPROCESS_RULES: List[TransformRule] = [
    TransformRule(
        name="fix-header-conditional-access",
        description="Fix header access in conditional statements",
        pattern=(r"insomnia\.response\.headers\.get\(([^)]+)\)\s*&&\s*"
                 r"insomnia\.response\.headers\.get\(\1\)\.(?!value\b)(\w+)"),
        replacement="insomnia.response.headers.get($1) && insomnia.response.headers.get($1).value.$2",
    ),
    TransformRule(
        name="fix-header-string-comparison",
        description="Fix header string comparisons",
        pattern=r"insomnia\.response\.headers\.get\(([^)]+)\)\s*(===|!==|==|!=)\s*",
        replacement="insomnia.response.headers.get($1).value $2 ",
    ),
    TransformRule(
        name="fix-header-value-access",
        description="Fix header value access for Insomnia API",
        pattern=r"insomnia\.response\.headers\.get\(([^)]+)\)\.(?!value\b)(\w+)",
        replacement="insomnia.response.headers.get($1).value.$2",
    ),
    TransformRule(
        name="fix-request-headers-add",
        description="Convert insomnia.request.headers.add() to insomnia.request.addHeader()",
        pattern=r"insomnia\.request\.headers\.add\s*\(\s*\{([\s\S]*?)\}\s*\)\s*;?",
        replacement="insomnia.request.addHeader({$1});",
    ),
    TransformRule(
        name="fix-request-url-assignment",
        description="Convert insomnia.request.url assignment to update() method",
        pattern=r"insomnia\.request\.url\s*=\s*([^;]+);?",
        replacement="insomnia.request.url.update($1);",
    ),
]


# ============================================================================
# EXPERIMENTAL RULES (opt-in, appended after the standard list)
# ============================================================================

EXPERIMENTAL_PREPROCESS_RULES: List[TransformRule] = []

EXPERIMENTAL_POSTPROCESS_RULES: List[TransformRule] = [
    # Each pass only rewrites the accessor nearest the identifier, so
    # data['a']['b'] needs one pass per level.
    TransformRule(
        name="bracket-notation-to-dot",
        description="Convert obj['key'] and obj[\"key\"] property access to obj.key",
        pattern=r"(\w+)\[(['\"])([A-Za-z_$][\w$]*)\2\]",
        replacement="$1.$3",
        fixpoint=True,
    ),
]


def default_transform_config() -> TransformConfig:
    """Fresh copy of the built-in rule lists (rules are mutable via toggle)."""
    return TransformConfig(
        preprocess=[copy_rule(rule) for rule in DEFAULT_PREPROCESS_RULES],
        postprocess=[copy_rule(rule) for rule in DEFAULT_POSTPROCESS_RULES],
    )


def experimental_rules(phase: str) -> List[TransformRule]:
    """
    Fresh copy of the experimental rules for a phase.

    Args:
        phase: 'preprocess' or 'postprocess'

    Raises:
        ValueError: If phase is unknown
    """
    tiers = {
        'preprocess': EXPERIMENTAL_PREPROCESS_RULES,
        'postprocess': EXPERIMENTAL_POSTPROCESS_RULES,
    }
    if phase not in tiers:
        raise ValueError(f"Unknown transform phase: {phase}")
    return [copy_rule(rule) for rule in tiers[phase]]


def copy_rule(rule: TransformRule) -> TransformRule:
    return TransformRule(**vars(rule))


# ============================================================================
# SAMPLE CONFIGURATION
# ============================================================================

SAMPLE_CONFIG_DOCUMENTATION: Dict[str, str] = {
    "preprocess": "Rules applied to the raw Postman JSON before it is parsed",
    "postprocess": "Rules applied to scripts after pm.* to insomnia.* conversion",
    "pattern": "Regular expression pattern to match (ECMAScript syntax, single backslash escaping)",
    "replacement": "Replacement string (use $1, $2, etc. for capture groups)",
    "flags": "Regex flags: 'g' for global, 'i' for case-insensitive, 'm' for multiline, 's' for dot-all",
    "enabled": "Set to false to disable a rule without deleting it",
    "fixpoint": "Set to true to re-apply a rule until the text stops changing",
}

EXPERIMENTAL_NOTICE = (
    "Rules marked (EXPERIMENTAL) are only applied when conversion runs with "
    "--experimental; they may change script semantics, review the output."
)


def build_sample_config(experimental: bool = False) -> Dict[str, Any]:
    """
    Build the sample transform configuration document.

    Args:
        experimental: Also list the experimental rules, with their
                      descriptions suffixed "(EXPERIMENTAL)"

    Returns:
        JSON-serializable dictionary
    """
    config = default_transform_config()
    preprocess = [rule.to_dict() for rule in config.preprocess]
    postprocess = [rule.to_dict() for rule in config.postprocess]

    sample: Dict[str, Any] = {
        "_comment": "Transform Configuration - Generated from Default Rules",
        "_description": "Customize preprocessing and postprocessing rules for Postman to Insomnia conversion",
        "_documentation": dict(SAMPLE_CONFIG_DOCUMENTATION),
    }

    if experimental:
        sample["_experimental_notice"] = EXPERIMENTAL_NOTICE
        for phase, rules in (('preprocess', preprocess), ('postprocess', postprocess)):
            for rule in experimental_rules(phase):
                rule_dict = rule.to_dict()
                rule_dict['description'] = f"{rule.description} (EXPERIMENTAL)"
                rules.append(rule_dict)

    sample["preprocess"] = preprocess
    sample["postprocess"] = postprocess
    return sample
