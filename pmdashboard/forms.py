from django import forms


class MilestoneUploadForm(forms.Form):
    """رفع ملف CSV أو Excel لاستيراد الـ Milestones."""
    milestones_file = forms.FileField(
        label="Milestones file (CSV or Excel)",
        required=True,
        widget=forms.ClearableFileInput(attrs={
            "class": "form-control",
            "accept": ".csv,.xlsx,.xlsm",
        }),
    )
    default_quarter = forms.CharField(
        label="Default quarter",
        required=False,
        max_length=10,
        help_text="يُستخدم للصفوف اللي مفيهاش quarter (مثال: Q425).",
    )


class MilestoneRefForm(forms.Form):
    quarter = forms.CharField(max_length=10)
    category = forms.CharField(max_length=80)
    id = forms.CharField(max_length=200)


class MilestoneProgressForm(MilestoneRefForm):
    progress = forms.IntegerField(min_value=0, max_value=100)


class WeeklyTaskForm(forms.Form):
    quarter = forms.CharField(max_length=10)
    week = forms.CharField(max_length=10, required=False, help_text="مثال: 2025-W47 (فاضي = الأسبوع الحالي)")
    category = forms.CharField(max_length=80)
    title = forms.CharField(max_length=300)
    subtasks = forms.CharField(required=False, help_text="مفصولة بـ ;")
    person = forms.CharField(max_length=120)
    percent = forms.IntegerField(min_value=0, required=False)

    def __init__(self, *args, categories=None, people=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.categories = categories or []
        self.people = people or []

    def clean_category(self):
        category = self.cleaned_data["category"].strip()
        if self.categories and category not in self.categories:
            raise forms.ValidationError(f"Unknown category: {category}")
        return category

    def clean_person(self):
        person = self.cleaned_data["person"].strip()
        if self.people and person not in self.people:
            raise forms.ValidationError(f"Unknown person: {person}")
        return person


class DailyUpdateForm(forms.Form):
    name = forms.CharField(max_length=120)
    today = forms.CharField(required=False, widget=forms.Textarea)
    day = forms.DateField(required=False)
