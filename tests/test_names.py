import pytest

from hackcert.shared.names import certificate_filename, initials


@pytest.mark.smoke
def test_filename_convention():
    assert (
        certificate_filename("Saarthix", "Spring Hack 2025", "Jane Doe")
        == "Saarthix_Spring_Hack_2025_Jane_Doe_Certificate.pdf"
    )


def test_filename_strips_punctuation_from_honoree_only():
    name = certificate_filename("Saarthix", "Hack  Day", "José O'Neil-Smith!")
    assert name == "Saarthix_Hack_Day_Jos_ONeilSmith_Certificate.pdf"


def test_filename_team_honoree():
    assert (
        certificate_filename("Saarthix", "AI Hack", "Byte Busters")
        == "Saarthix_AI_Hack_Byte_Busters_Certificate.pdf"
    )


@pytest.mark.parametrize(
    "value,expected",
    [
        ("Saarthix", "SX"),
        ("Acme Robotics", "AR"),
        ("open-ai labs", "OA"),
        ("X", "X"),
        ("", "?"),
        (None, "?"),
    ],
)
def test_initials(value, expected):
    assert initials(value) == expected
