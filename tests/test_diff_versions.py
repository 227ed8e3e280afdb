import copy

import pytest

from src.libs.cv_history.diff import diff_versions, normalize_skill_name
from src.libs.cv_history.models import DiffKind, DiffToken, SectionKind
from src.resume_schemas.resume import ResumeContent


@pytest.fixture
def snapshot():
    return {
        'personal_info': {'first_name': 'Ada', 'last_name': 'Lovelace', 'email': 'ada@example.com'},
        'summary': 'Engineer focused on data pipelines',
        'experience': [
            {'id': '1', 'position': 'Data Engineer', 'company': 'Initech',
             'description': 'Built ETL jobs in Python'},
            {'id': '2', 'position': 'Analyst', 'company': 'Globex',
             'description': 'Wrote SQL reports'},
        ],
        'education': [],
        'skills': [{'name': 'Python'}, {'name': 'SQL'}],
    }


def test_identical_snapshots_have_no_diffs(snapshot):
    assert diff_versions(snapshot, copy.deepcopy(snapshot)) == []
    assert diff_versions(snapshot, snapshot) == []


def test_summary_change(snapshot):
    new = copy.deepcopy(snapshot)
    new['summary'] = 'Engineer focused on streaming data pipelines'

    diffs = diff_versions(snapshot, new)

    assert len(diffs) == 1
    assert diffs[0].section == SectionKind.SUMMARY
    assert diffs[0].label == 'Summary'
    assert diffs[0].has_changes is True
    assert diffs[0].tokens == [
        DiffToken(DiffKind.EQUAL, 'Engineer focused on'),
        DiffToken(DiffKind.ADD, 'streaming'),
        DiffToken(DiffKind.EQUAL, 'data pipelines'),
    ]
    assert diffs[0].added is None and diffs[0].removed is None


def test_missing_summary_counts_as_empty(snapshot):
    old = copy.deepcopy(snapshot)
    new = copy.deepcopy(snapshot)
    del old['summary']
    new['summary'] = None
    assert diff_versions(old, new) == []


def test_experience_description_change(snapshot):
    new = copy.deepcopy(snapshot)
    new['experience'][1]['description'] = 'Wrote SQL and Tableau reports'

    diffs = diff_versions(snapshot, new)

    assert [d.section for d in diffs] == [SectionKind.EXPERIENCE]
    assert diffs[0].label == 'Analyst @ Globex'
    assert diffs[0].tokens == [
        DiffToken(DiffKind.EQUAL, 'Wrote SQL'),
        DiffToken(DiffKind.ADD, 'and Tableau'),
        DiffToken(DiffKind.EQUAL, 'reports'),
    ]


def test_experience_label_prefers_new_entry(snapshot):
    new = copy.deepcopy(snapshot)
    new['experience'][0]['position'] = 'Senior Data Engineer'
    new['experience'][0]['description'] = 'Built ETL jobs in Python and Scala'

    diffs = diff_versions(snapshot, new)

    assert diffs[0].label == 'Senior Data Engineer @ Initech'


def test_experience_label_falls_back_to_old_entry():
    old = {'experience': [
        {'description': 'a'},
        {'description': 'b'},
        {'position': 'Engineer', 'company': 'Acme', 'description': 'Kept the lights on'},
    ]}
    new = {'experience': [{'description': 'a'}, {'description': 'b'}]}

    diffs = diff_versions(old, new)

    assert len(diffs) == 1
    assert diffs[0].label == 'Engineer @ Acme'
    assert diffs[0].tokens == [DiffToken(DiffKind.REMOVE, 'Kept the lights on')]


def test_experience_label_numbered_when_no_position():
    old = {'experience': [{'company': 'Acme', 'description': 'old text'}]}
    new = {'experience': [{'company': 'Acme', 'description': 'new text'}]}
    assert diff_versions(old, new)[0].label == 'Experience #1'


def test_experience_label_with_missing_company():
    old = {'experience': []}
    new = {'experience': [{'position': 'Founder', 'description': 'Started a company'}]}
    diffs = diff_versions(old, new)
    assert diffs[0].label == 'Founder @ '
    assert diffs[0].tokens == [DiffToken(DiffKind.ADD, 'Started a company')]


def test_added_experience_entry_is_full_text_diff(snapshot):
    new = copy.deepcopy(snapshot)
    new['experience'].append({'position': 'Intern', 'company': 'Hooli', 'description': 'Fixed bugs'})

    diffs = diff_versions(snapshot, new)

    assert len(diffs) == 1
    assert diffs[0].label == 'Intern @ Hooli'
    assert diffs[0].tokens == [DiffToken(DiffKind.ADD, 'Fixed bugs')]


def test_unchanged_experience_metadata_is_ignored(snapshot):
    new = copy.deepcopy(snapshot)
    new['experience'][0]['company'] = 'Initrode'
    assert diff_versions(snapshot, new) == []


def test_skills_added_and_removed():
    old = {'skills': [{'name': 'Go'}, {'name': 'Rust'}]}
    new = {'skills': [{'name': 'Rust'}, {'name': 'Python'}]}

    diffs = diff_versions(old, new)

    assert len(diffs) == 1
    assert diffs[0].section == SectionKind.SKILLS
    assert diffs[0].label == 'Skills'
    assert diffs[0].added == ['Python']
    assert diffs[0].removed == ['Go']
    assert diffs[0].tokens is None


def test_skills_compared_case_insensitively():
    old = {'skills': [{'name': 'python'}]}
    new = {'skills': [{'name': 'Python'}]}
    assert diff_versions(old, new) == []


def test_skills_keep_source_order():
    old = {'skills': []}
    new = {'skills': [{'name': 'Zig'}, {'name': 'Ada'}, {'name': 'Kotlin'}]}
    assert diff_versions(old, new)[0].added == ['Zig', 'Ada', 'Kotlin']


def test_malformed_skills_do_not_raise():
    old = {'skills': [{'name': {'name': 'Docker'}}, {'id': 'x'}, None, 'Terraform']}
    new = {'skills': [{'name': 'docker'}, {'name': 42}]}

    diffs = diff_versions(old, new)

    assert len(diffs) == 1
    assert diffs[0].added == []
    assert diffs[0].removed == ['Terraform']


def test_sections_reported_in_order(snapshot):
    new = copy.deepcopy(snapshot)
    new['skills'].append({'name': 'Airflow'})
    new['experience'][0]['description'] = 'Built streaming jobs'
    new['summary'] = 'Data engineer'

    sections = [d.section for d in diff_versions(snapshot, new)]

    assert sections == [SectionKind.SUMMARY, SectionKind.EXPERIENCE, SectionKind.SKILLS]


def test_accepts_resume_content_models(snapshot):
    old = ResumeContent(**snapshot)
    new = ResumeContent(**dict(snapshot, summary='Engineer focused on ML pipelines'))

    diffs = diff_versions(old, new)

    assert [d.section for d in diffs] == [SectionKind.SUMMARY]


def test_section_diff_serializes(snapshot):
    new = copy.deepcopy(snapshot)
    new['skills'] = [{'name': 'Python'}]
    data = diff_versions(snapshot, new)[0].to_dict()
    assert data == {
        'section': 'skills',
        'label': 'Skills',
        'has_changes': True,
        'added': [],
        'removed': ['SQL'],
    }


@pytest.mark.parametrize("raw, expected", [
    ({'name': 'Go'}, 'Go'),
    ({'name': {'name': 'Go'}}, 'Go'),
    ({'name': {'label': 'Go'}}, ''),
    ({'name': None}, ''),
    ({'name': 7}, ''),
    ({}, ''),
    ('Go', 'Go'),
    (None, ''),
    (3, '3'),
])
def test_normalize_skill_name(raw, expected):
    assert normalize_skill_name(raw) == expected
