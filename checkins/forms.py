from django import forms
from .models import DailyLog


class DailyLogForm(forms.ModelForm):
    """Daily log body; `date` defaults to the user's today when omitted."""
    date = forms.DateField(required=False)

    class Meta:
        model = DailyLog
        fields = ['action', 'reflection', 'mood', 'date']


class HistoryFilterForm(forms.Form):
    startDate = forms.DateField(required=False)
    endDate = forms.DateField(required=False)

    def clean(self):
        cleaned_data = super().clean()
        start, end = cleaned_data.get('startDate'), cleaned_data.get('endDate')
        if start and end and start > end:
            raise forms.ValidationError('startDate must be on or before endDate')
        return cleaned_data
