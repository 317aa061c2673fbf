"""Prompt templates for upgrade-risk analysis.

The section headings and verdict markers below are matched by the combined
report summary, so they must be rendered exactly as written.
"""

VERDICT_RECOMMENDED = "🟢 RECOMMENDED"
VERDICT_CONDITIONAL = "🟡 CONDITIONAL"
VERDICT_NOT_RECOMMENDED = "🔴 NOT RECOMMENDED"

SECTION_EXECUTIVE_SUMMARY = "### 🎯 **Executive Summary**"
SECTION_VERSION_CHANGES = "### 🔄 **Version Changes**"
SECTION_IMPROVEMENTS = "### ⚡ **Key Improvements**"
SECTION_SECURITY = "### 🔒 **Security Assessment**"
SECTION_COMPATIBILITY = "### ⚠️ **Compatibility & Risks**"
SECTION_TIMELINE = "### 📅 **Recommendation Timeline**"
SECTION_ACTION_ITEMS = "### ✅ **Action Items**"

SECTION_HEADINGS = (
    SECTION_EXECUTIVE_SUMMARY,
    SECTION_VERSION_CHANGES,
    SECTION_IMPROVEMENTS,
    SECTION_SECURITY,
    SECTION_COMPATIBILITY,
    SECTION_TIMELINE,
    SECTION_ACTION_ITEMS,
)

RESEARCH_SYSTEM_PROMPT = (
    "You are a software research assistant. Provide factual, current "
    "information about software packages, versions, security issues, and "
    "changes. Follow the requested report structure exactly."
)

_TEMPLATE = """You are a senior software analyst. Research the software package {name} \
(package ID: {package_id}) and its upgrade from version {current_version} to \
{available_version}, then write an upgrade recommendation report.

## Package Details:
- **Software Name**: {name}
- **Package ID**: `{package_id}`
- **Current Version**: `{current_version}`
- **Available Version**: `{available_version}`

## Required Report Format:

Provide your analysis in this **exact markdown structure**:

{executive_summary}
> {recommended} / {conditional} / {not_recommended}

Brief 1-2 sentence recommendation with urgency level.

{version_changes}
- **Current Version**: `{current_version}`
- **Target Version**: `{available_version}`
- **Update Type**: 🔵 Major / 🟡 Minor / 🟢 Patch / 🔴 Breaking
- **Release Date**: [Date if available]

{improvements}
- 🆕 **New Features**: List major new functionality
- 🐛 **Bug Fixes**: Critical issues resolved
- 🔧 **Enhancements**: Performance and usability improvements

{security}
- 🛡️ **Security Fixes**: List any CVE fixes or security patches
- 🚨 **Vulnerability Status**: Current security standing
- 🔐 **Risk Level**: 🟢 Low / 🟡 Medium / 🔴 High / 🟣 Critical

{compatibility}
- 💥 **Breaking Changes**: List any breaking changes
- 🔗 **Dependencies**: New requirements or conflicts
- 🖥️ **System Requirements**: Hardware/OS compatibility
- 🔄 **Migration Effort**: 🟢 None / 🟡 Minor / 🔴 Significant

{timeline}
- 🚀 **Immediate** (Security/Critical)
- 📆 **Within 1 week** (Important updates)
- 🗓️ **Within 1 month** (Regular updates)
- ⏳ **When convenient** (Optional updates)

{action_items}
- [ ] **Pre-upgrade**: Backup/preparation steps
- [ ] **During upgrade**: Installation considerations
- [ ] **Post-upgrade**: Verification and testing
- [ ] **Rollback plan**: If issues occur

Use the exact headings and emoji indicators above, include links to release \
notes where available, and keep the analysis factual and actionable."""


def build_prompt(
    name: str,
    package_id: str,
    current_version: str,
    available_version: str,
) -> str:
    """Render the upgrade analysis request for one package.

    Args:
        name: Package display name.
        package_id: winget package identifier.
        current_version: Installed version.
        available_version: Version being considered.

    Returns:
        The prompt text, identical for identical inputs.
    """
    return _TEMPLATE.format(
        name=name,
        package_id=package_id,
        current_version=current_version,
        available_version=available_version,
        recommended=VERDICT_RECOMMENDED,
        conditional=VERDICT_CONDITIONAL,
        not_recommended=VERDICT_NOT_RECOMMENDED,
        executive_summary=SECTION_EXECUTIVE_SUMMARY,
        version_changes=SECTION_VERSION_CHANGES,
        improvements=SECTION_IMPROVEMENTS,
        security=SECTION_SECURITY,
        compatibility=SECTION_COMPATIBILITY,
        timeline=SECTION_TIMELINE,
        action_items=SECTION_ACTION_ITEMS,
    )
