"""
Best-effort extraction of CV content from LaTeX source.

Each part of the CV is picked up by its own regular expression pass. A pass
that finds nothing leaves the default value in place, so custom sections
or unusual markup never make the whole parse fail.
"""

import re
from typing import Any, Dict, List, Optional, Tuple

from src.logging import logger

NAME_PATTERNS = [
    re.compile(r'\{\\LARGE\\bfseries\s+([^}]+)\}'),
    re.compile(r'\{\\Large\\bfseries\s+([^}]+)\}'),
    re.compile(r'\{\\large\\bfseries\s+([^}]+)\}'),
    re.compile(r'\\textbf\{\\LARGE\s+([^}]+)\}'),
]

CONTACT_BLOCK = re.compile(r'\\begin\{center\}([\s\S]*?)\\end\{center\}')
EMAIL = re.compile(r'([a-zA-Z0-9._-]+@[a-zA-Z0-9._-]+\.[a-zA-Z0-9_-]+)')
PHONE = re.compile(r'(\+?\d[\d\s\-()]{8,})')
HREF = re.compile(r'\\href\{([^}]+)\}')
LOCATION = re.compile(r'\\quad\s*\\quad\s*([^\\]+?)\\\\(?:\n|\\)')

_SECTION_END = r'(?=\\section\*\{|\\end\{document\})'


def _section_patterns(titles: List[str]) -> List[re.Pattern]:
    return [re.compile(r'\\section\*\{' + re.escape(title) + r'\}([\s\S]*?)' + _SECTION_END)
            for title in titles]


SUMMARY_PATTERNS = [
    re.compile(r'\\section\*\{' + title + r'\}\s*\n([\s\S]*?)(?=\\section|\\end\{document\})')
    for title in ('Summary', 'Profile', 'About', 'Objective')
]
EXPERIENCE_PATTERNS = _section_patterns(
    ['Professional Experience', 'Work Experience', 'Experience', 'Employment'])
EDUCATION_PATTERNS = _section_patterns(
    ['Education', 'Academic Background', 'Academic Qualifications'])
SKILLS_PATTERNS = _section_patterns(
    ['Skills', 'Technical Skills', 'Competencies', 'Expertise'])

EXPERIENCE_ENTRY = re.compile(
    r'\\textbf\{([^}]+)\}\s*\\hfill\s*([^\\]+?)\\\\\s*'
    r'\\textit\{([^}]+)\}(?:,\s*)?([^\\]*)'
)
EDUCATION_ENTRY = re.compile(
    r'\\textbf\{([^}]+?)(?:\s+in\s+([^}]+))?\}\s*\\hfill\s*([^\\]+?)\\\\\s*'
    r'\\textit\{([^}]+)\}(?:,\s*)?([^\\\n]*?)\s*'
    r'(?:\\quad\s*GPA:\s*([^\n\\]+))?(?:\\\\|\n|$)'
)
SKILL_ENTRY = re.compile(r'\\item\s*\\textbf\{([^}]+)\}(?:\s*\(([^)]+)\))?')

SKILL_LEVELS = ('beginner', 'intermediate', 'advanced', 'expert')
DEFAULT_FIELD_OF_STUDY = 'General Studies'
DEFAULT_SKILL_CATEGORY = 'General'


def _empty_content() -> Dict[str, Any]:
    return {
        'personal_info': {
            'first_name': '',
            'last_name': '',
            'email': '',
            'phone': '',
            'location': '',
            'website': '',
            'linkedin': '',
            'github': '',
        },
        'summary': '',
        'experience': [],
        'education': [],
        'skills': [],
    }


def _first_section(patterns: List[re.Pattern], latex_code: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(latex_code)
        if match:
            return match.group(1)
    return None


def _split_dates(dates: str) -> Tuple[str, str, bool]:
    """Split ``"Jan 2020 -- Present"`` into start, end and current flag."""
    parts = [d.strip() for d in dates.split('--')]
    start_date = parts[0] if parts else ''
    end_date = parts[1] if len(parts) > 1 else ''
    is_current = end_date == 'Present'
    return start_date, '' if is_current else end_date, is_current


def _parse_name(latex_code: str, personal_info: Dict[str, str]) -> None:
    for pattern in NAME_PATTERNS:
        match = pattern.search(latex_code)
        if match:
            parts = match.group(1).split()
            if parts:
                personal_info['first_name'] = parts[0]
                personal_info['last_name'] = ' '.join(parts[1:])
            return


def _parse_contact(latex_code: str, personal_info: Dict[str, str]) -> None:
    block = CONTACT_BLOCK.search(latex_code)
    if block:
        contact_text = block.group(1)
        email = EMAIL.search(contact_text)
        if email:
            personal_info['email'] = email.group(1)
        phone = PHONE.search(contact_text)
        if phone:
            personal_info['phone'] = phone.group(1).strip()
        website = HREF.search(contact_text)
        if website:
            personal_info['website'] = website.group(1)

    location = LOCATION.search(latex_code)
    if location:
        personal_info['location'] = location.group(1).strip()


def _parse_experience(section: str) -> List[Dict[str, Any]]:
    experiences = []
    for idx, match in enumerate(EXPERIENCE_ENTRY.finditer(section), start=1):
        position, dates, company, location = match.groups()
        start_date, end_date, is_current = _split_dates(dates)
        experiences.append({
            'id': str(idx),
            'position': position.strip(),
            'company': company.strip(),
            'location': (location or '').strip(),
            'start_date': start_date,
            'end_date': end_date,
            'is_current': is_current,
            'description': '',
            'achievements': [],
        })
    return experiences


def _parse_education(section: str) -> List[Dict[str, Any]]:
    educations = []
    for idx, match in enumerate(EDUCATION_ENTRY.finditer(section), start=1):
        degree, field, dates, institution, location, gpa = match.groups()
        start_date, end_date, is_current = _split_dates(dates)
        educations.append({
            'id': str(idx),
            'degree': degree.strip(),
            'field': (field or '').strip() or DEFAULT_FIELD_OF_STUDY,
            'institution': institution.strip(),
            'location': (location or '').strip(),
            'start_date': start_date,
            'end_date': end_date,
            'is_current': is_current,
            'gpa': (gpa or '').strip(),
        })
    return educations


def _parse_skills(section: str) -> List[Dict[str, Any]]:
    skills = []
    for idx, match in enumerate(SKILL_ENTRY.finditer(section), start=1):
        name, level = match.groups()
        level = (level or '').strip().lower()
        skills.append({
            'id': str(idx),
            'name': name.strip(),
            'category': DEFAULT_SKILL_CATEGORY,
            'level': level if level in SKILL_LEVELS else None,
        })
    return skills


def parse_latex_to_content(latex_code: str) -> Optional[Dict[str, Any]]:
    """
    Extract CV content from LaTeX source.

    Args:
        latex_code: Full LaTeX document

    Returns:
        A partial CV content dictionary, or None if parsing failed
    """
    try:
        content = _empty_content()
        _parse_name(latex_code, content['personal_info'])
        _parse_contact(latex_code, content['personal_info'])

        for pattern in SUMMARY_PATTERNS:
            match = pattern.search(latex_code)
            if match:
                content['summary'] = match.group(1).strip()
                break

        section = _first_section(EXPERIENCE_PATTERNS, latex_code)
        if section is not None:
            content['experience'] = _parse_experience(section)

        section = _first_section(EDUCATION_PATTERNS, latex_code)
        if section is not None:
            content['education'] = _parse_education(section)

        section = _first_section(SKILLS_PATTERNS, latex_code)
        if section is not None:
            content['skills'] = _parse_skills(section)

        logger.debug(
            f"Parsed LaTeX: {len(content['experience'])} experience, "
            f"{len(content['education'])} education, {len(content['skills'])} skill entries"
        )
        return content

    except Exception as e:
        logger.error(f"Error parsing LaTeX: {e}")
        return None


def validate_latex_syntax(latex_code: str) -> Tuple[bool, List[str]]:
    """Run basic structural checks on a LaTeX document."""
    errors = []

    open_braces = latex_code.count('{')
    close_braces = latex_code.count('}')
    if open_braces != close_braces:
        errors.append(f"Unbalanced braces: {open_braces} opening, {close_braces} closing")

    begin_env = latex_code.count('\\begin{')
    end_env = latex_code.count('\\end{')
    if begin_env != end_env:
        errors.append(f"Unbalanced environments: {begin_env} \\begin, {end_env} \\end")

    if '\\documentclass' not in latex_code:
        errors.append('Missing \\documentclass declaration')
    if '\\begin{document}' not in latex_code:
        errors.append('Missing \\begin{document}')
    if '\\end{document}' not in latex_code:
        errors.append('Missing \\end{document}')

    return len(errors) == 0, errors
