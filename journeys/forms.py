from django import forms


class StartJourneyForm(forms.Form):
    journeyId = forms.SlugField(max_length=100)


class ReflectionForm(forms.Form):
    """Body of a reflection submission. Ciphertext and IV are opaque strings."""
    day = forms.IntegerField(min_value=1)
    reflection = forms.CharField(strip=False)
    iv = forms.CharField(strip=False)
