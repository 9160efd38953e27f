"""Tests for institutional email classification."""

import pytest
from trustgate.institutional import InstitutionalIdentityClassifier, has_academic_suffix
from trustgate.schemas import FailureCode


@pytest.fixture
def classifier() -> InstitutionalIdentityClassifier:
    return InstitutionalIdentityClassifier()


class TestAcademicSuffix:
    """Tests for suffix detection."""

    @pytest.mark.parametrize(
        "domain", ["stanford.edu", "cs.unimelb.edu.au", "ox.ac.uk", "iisc.ac.in"]
    )
    def test_academic(self, domain):
        assert has_academic_suffix(domain) is True

    @pytest.mark.parametrize("domain", ["example.com", "education.org", "ac.uk"])
    def test_not_academic(self, domain):
        assert has_academic_suffix(domain) is False


class TestClassify:
    """Tests for the classification order."""

    @pytest.mark.parametrize(
        "email",
        [
            "student@stanford.edu",
            "prof@cs.unimelb.edu.au",
            "fellow@ox.ac.uk",
            "admin@springfield-college.org",
            "lab@research-centre.org",
            "staff@portal.ac-lyon.fr",
        ],
    )
    def test_institutional(self, classifier, email):
        """Suffixes, primary keywords, secondary keywords, and label hints."""
        assert classifier.classify(email).accepted is True

    @pytest.mark.parametrize(
        "email", ["someone@gmail.com", "someone@yahoo.co.uk", "someone@GMX.de"]
    )
    def test_consumer_domain(self, classifier, email):
        """Consumer providers are rejected before any heuristic runs."""
        outcome = classifier.classify(email)
        assert outcome.code == FailureCode.PERSONAL_EMAIL_DOMAIN

    def test_unrelated_domain(self, classifier):
        """A company domain is not institutional."""
        outcome = classifier.classify("jane@acme-corp.com")
        assert outcome.code == FailureCode.NOT_INSTITUTIONAL_DOMAIN

    def test_malformed(self, classifier):
        assert classifier.classify("not-an-email").code == FailureCode.MALFORMED_EMAIL

    def test_custom_consumer_list(self):
        """Consumer list is injectable."""
        classifier = InstitutionalIdentityClassifier(frozenset({"campusmail.com"}))
        outcome = classifier.classify("x@campusmail.com")
        assert outcome.code == FailureCode.PERSONAL_EMAIL_DOMAIN
