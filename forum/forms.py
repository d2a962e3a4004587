from django import forms


class FlagForm(forms.Form):
    reason = forms.CharField(max_length=500)


class ModerateForm(forms.Form):
    approved = forms.BooleanField(required=False)
    moderationNotes = forms.CharField(required=False)


class CommentForm(forms.Form):
    # Length rules live on ForumComment.clean()
    content = forms.CharField(required=False, strip=False)
    parentCommentId = forms.IntegerField(required=False, min_value=1)
