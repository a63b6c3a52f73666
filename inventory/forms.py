from django import forms

from .models import Product, Color


class ProductForm(forms.ModelForm):
    """Product form used by the admin; mirrors the API validation rules."""

    class Meta:
        model = Product
        fields = [
            'name',
            'sku',
            'description',
            'category',
            'sizes',
            'colors',
            'price',
            'cost',
            'quantity_in_stock',
        ]
        widgets = {
            'sizes': forms.CheckboxSelectMultiple,
            'colors': forms.CheckboxSelectMultiple,
            'description': forms.Textarea(attrs={'rows': 3}),
        }

    def clean_name(self):
        name = (self.cleaned_data.get('name') or '').strip()
        if not name:
            raise forms.ValidationError('Name is required')
        return name

    def clean_sku(self):
        sku = (self.cleaned_data.get('sku') or '').strip()
        if not sku:
            return None
        duplicates = Product.objects.filter(sku__iexact=sku)
        if self.instance.pk:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise forms.ValidationError(f"SKU '{sku}' already exists")
        return sku


class ColorForm(forms.ModelForm):

    class Meta:
        model = Color
        fields = ['name', 'hex_code', 'sort_order']
        widgets = {
            'hex_code': forms.TextInput(attrs={'type': 'color'}),
        }

    def clean_hex_code(self):
        hex_code = self.cleaned_data.get('hex_code') or ''
        return hex_code.upper()
