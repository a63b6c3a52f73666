from django import forms
from .models import Invoice


class InvoiceAdminForm(forms.ModelForm):
    """
    Editable part of a saved invoice: customer details and payment status.
    Totals and items are fixed at sale time.
    """

    class Meta:
        model = Invoice
        fields = [
            'customer_name',
            'customer_phone',
            'payment_status',
            'expected_payment_date',
        ]
        widgets = {
            'customer_name': forms.TextInput(attrs={
                'placeholder': 'Customer name'
            }),
            'customer_phone': forms.TextInput(attrs={
                'placeholder': 'Phone number'
            }),
            'expected_payment_date': forms.DateInput(attrs={
                'type': 'date'
            }),
        }

    def clean_customer_name(self):
        return (self.cleaned_data.get('customer_name') or '').strip()

    def clean_customer_phone(self):
        return (self.cleaned_data.get('customer_phone') or '').strip()

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('payment_status') != Invoice.PAYMENT_PENDING:
            cleaned_data['expected_payment_date'] = None
        return cleaned_data
